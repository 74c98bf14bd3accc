import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

import jwt

from ..ports.account_repo import AccountDto, AccountRepository
from ..ports.refresh_token_repo import RefreshTokenRepository
from ...exceptions import InvalidRefreshTokenError, TokenConfigurationError
from ...utils import create_access_token, create_refresh_token, decode_token, utcnow

logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    account: AccountDto
    access_token: str
    access_max_age: int
    refresh_token: Optional[str] = None
    refresh_max_age: Optional[int] = None


@dataclass
class SessionService:
    """Mints access/refresh token pairs and keeps one live refresh token per account."""
    refresh_tokens: RefreshTokenRepository
    access_secret: Optional[str]
    refresh_secret: Optional[str]
    algorithm: str = "HS256"
    access_minutes: int = 15
    refresh_days: int = 7
    accounts: Dict[str, AccountRepository] = field(default_factory=dict)
    clock: Callable[[], datetime] = utcnow

    @property
    def access_max_age(self) -> int:
        return self.access_minutes * 60

    @property
    def refresh_max_age(self) -> int:
        return self.refresh_days * 24 * 60 * 60

    def ensure_configured(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            logger.error("JWT_SECRET / JWT_REFRESH_SECRET are not configured")
            raise TokenConfigurationError()

    def issue_session(self, account: AccountDto) -> IssuedSession:
        self.ensure_configured()
        access_token = create_access_token(account.id, self.access_secret, self.algorithm, self.access_minutes)
        refresh_token = create_refresh_token(account.id, self.refresh_secret, self.algorithm, self.refresh_days)

        expires_at = self.clock() + timedelta(days=self.refresh_days)
        self.refresh_tokens.replace_for_account(account.id, account.kind, refresh_token, expires_at)
        logger.info(f"Issued session for {account.kind} {account.id}")

        return IssuedSession(
            account=account,
            access_token=access_token,
            access_max_age=self.access_max_age,
            refresh_token=refresh_token,
            refresh_max_age=self.refresh_max_age,
        )

    def refresh_access_token(self, refresh_token: Optional[str]) -> IssuedSession:
        """Exchange a stored, unexpired refresh token for a new access token.

        The refresh token itself is not rotated.
        """
        if not refresh_token:
            raise InvalidRefreshTokenError("Refresh token required")
        self.ensure_configured()

        try:
            payload = decode_token(refresh_token, self.refresh_secret, self.algorithm)
        except jwt.ExpiredSignatureError:
            raise InvalidRefreshTokenError("Refresh token expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected refresh token: {e}")
            raise InvalidRefreshTokenError()

        stored = self.refresh_tokens.get_by_token(refresh_token)
        if stored is None or stored.expires_at <= self.clock() or stored.account_id != payload.get("sub"):
            raise InvalidRefreshTokenError("Refresh token has been revoked")

        repo = self.accounts.get(stored.account_kind)
        account = repo.get_by_id(stored.account_id) if repo else None
        if account is None:
            raise InvalidRefreshTokenError("Account not found")

        access_token = create_access_token(account.id, self.access_secret, self.algorithm, self.access_minutes)
        return IssuedSession(account=account, access_token=access_token, access_max_age=self.access_max_age)

    def revoke(self, refresh_token: Optional[str]) -> int:
        """Delete every stored refresh token belonging to the token's owner."""
        if not refresh_token:
            return 0
        stored = self.refresh_tokens.get_by_token(refresh_token)
        if stored is None:
            return 0
        removed = self.refresh_tokens.delete_for_account(stored.account_id, stored.account_kind)
        logger.info(f"Revoked {removed} refresh token(s) for {stored.account_kind} {stored.account_id}")
        return removed
