from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass
class RefreshTokenDto:
    id: str
    account_id: str
    account_kind: str
    token: str
    expires_at: datetime


class RefreshTokenRepository(Protocol):
    def replace_for_account(self, account_id: str, account_kind: str, token: str, expires_at: datetime) -> RefreshTokenDto:
        """Drop every stored token for the account and store this one."""
        ...

    def get_by_token(self, token: str) -> Optional[RefreshTokenDto]:
        ...

    def delete_for_account(self, account_id: str, account_kind: str) -> int:
        ...
