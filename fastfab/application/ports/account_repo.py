from dataclasses import dataclass
from typing import Optional, Protocol

CUSTOMER = "customer"
SELLER = "seller"


@dataclass
class AccountDto:
    id: str
    kind: str
    phone: str
    profile_complete: bool = True


class AccountRepository(Protocol):
    kind: str

    def get_by_phone(self, phone: str) -> Optional[AccountDto]:
        ...

    def get_by_id(self, account_id: str) -> Optional[AccountDto]:
        ...
