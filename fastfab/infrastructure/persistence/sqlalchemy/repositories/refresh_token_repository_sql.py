from datetime import datetime
from typing import Optional
from sqlmodel import Session, select

from .....db.models import RefreshToken
from .....application.ports.account_repo import SELLER, CUSTOMER
from .....application.ports.refresh_token_repo import RefreshTokenRepository, RefreshTokenDto
from .....utils import as_utc


class SqlRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, session: Session):
        self.session = session

    def _owner_column(self, account_kind: str):
        return RefreshToken.seller_id if account_kind == SELLER else RefreshToken.user_id

    def _to_dto(self, rec: RefreshToken) -> RefreshTokenDto:
        if rec.seller_id:
            account_id, kind = rec.seller_id, SELLER
        else:
            account_id, kind = rec.user_id, CUSTOMER
        return RefreshTokenDto(
            id=rec.id,
            account_id=account_id,
            account_kind=kind,
            token=rec.token,
            expires_at=as_utc(rec.expires_at),
        )

    def _delete_owned(self, account_id: str, account_kind: str) -> int:
        existing = self.session.exec(
            select(RefreshToken).where(self._owner_column(account_kind) == account_id)
        ).all()
        for rec in existing:
            self.session.delete(rec)
        return len(existing)

    def replace_for_account(self, account_id: str, account_kind: str, token: str, expires_at: datetime) -> RefreshTokenDto:
        self._delete_owned(account_id, account_kind)
        rec = RefreshToken(token=token, expires_at=as_utc(expires_at))
        if account_kind == SELLER:
            rec.seller_id = account_id
        else:
            rec.user_id = account_id
        self.session.add(rec)
        # delete and insert land in one commit
        self.session.commit()
        self.session.refresh(rec)
        return self._to_dto(rec)

    def get_by_token(self, token: str) -> Optional[RefreshTokenDto]:
        rec = self.session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
        return self._to_dto(rec) if rec else None

    def delete_for_account(self, account_id: str, account_kind: str) -> int:
        count = self._delete_owned(account_id, account_kind)
        self.session.commit()
        return count
