from typing import Optional
from sqlmodel import Session, select

from .....db.models import User, Seller
from .....application.ports.account_repo import AccountRepository, AccountDto, CUSTOMER, SELLER
from .....utils import phone_lookup_variants


class SqlCustomerRepository(AccountRepository):
    kind = CUSTOMER

    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> AccountDto:
        return AccountDto(id=user.id, kind=self.kind, phone=user.phone, profile_complete=bool(user.name))

    def get_by_phone(self, phone: str) -> Optional[AccountDto]:
        user = self.session.exec(
            select(User).where(User.phone.in_(phone_lookup_variants(phone)))
        ).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, account_id: str) -> Optional[AccountDto]:
        user = self.session.get(User, account_id)
        return self._to_dto(user) if user else None


class SqlSellerRepository(AccountRepository):
    kind = SELLER

    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, seller: Seller) -> AccountDto:
        return AccountDto(
            id=seller.id,
            kind=self.kind,
            phone=seller.phone,
            profile_complete=bool(seller.shop_name and seller.owner_name),
        )

    def get_by_phone(self, phone: str) -> Optional[AccountDto]:
        # Seller rows were historically stored with and without the country code
        for candidate in phone_lookup_variants(phone):
            seller = self.session.exec(select(Seller).where(Seller.phone == candidate)).first()
            if seller:
                return self._to_dto(seller)
        return None

    def get_by_id(self, account_id: str) -> Optional[AccountDto]:
        seller = self.session.get(Seller, account_id)
        return self._to_dto(seller) if seller else None
