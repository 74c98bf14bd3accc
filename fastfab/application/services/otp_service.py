import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..ports.account_repo import AccountDto, AccountRepository
from ..ports.audit_logger import AuditLogger
from ..ports.message_dispatcher import DispatchResult, MessageDispatcher
from ..ports.otp_repo import OtpRepository
from ..ports.rate_limiter import RateLimiter
from .session_service import IssuedSession, SessionService
from ...exceptions import (
    InvalidOtpFormatError,
    InvalidPhoneNumberError,
    OtpVerificationError,
    RateLimitExceededError,
)
from ...utils import generate_otp, is_valid_otp_code, is_valid_phone_number, normalize_phone_number, utcnow

logger = logging.getLogger(__name__)

NO_VALID_OTP = "No valid OTP found"
INVALID_OTP = "Invalid OTP code"


@dataclass
class IssuedOtp:
    phone_number: str
    expires_at: datetime
    resent: bool
    dispatch: DispatchResult
    account: Optional[AccountDto] = None


@dataclass
class VerifiedOtp:
    phone_number: str
    account: Optional[AccountDto] = None
    session: Optional[IssuedSession] = None

    @property
    def is_new_user(self) -> bool:
        return self.account is None


@dataclass
class OtpService:
    otps: OtpRepository
    accounts: AccountRepository
    dispatcher: MessageDispatcher
    sessions: SessionService
    rate_limiter: Optional[RateLimiter] = None
    audit: Optional[AuditLogger] = None
    ttl_minutes: int = 10
    max_attempts: int = 5
    send_max_requests: int = 5
    send_window_seconds: int = 3600
    clock: Callable[[], datetime] = utcnow
    code_generator: Callable[[], str] = generate_otp

    def _audit(self, action: str, phone: str, account_id: Optional[str] = None, success: bool = True, **details) -> None:
        if self.audit is not None:
            self.audit.log(action, phone, account_id=account_id, success=success, details=details or None)

    def _normalized_phone(self, raw_phone: Optional[str]) -> str:
        phone = normalize_phone_number(raw_phone)
        if not is_valid_phone_number(phone):
            logger.info(f"Rejected malformed phone number for {self.accounts.kind} OTP")
            raise InvalidPhoneNumberError()
        return phone

    def _dispatch(self, phone: str, code: str) -> DispatchResult:
        try:
            return self.dispatcher.send_otp(phone, code)
        except Exception as e:
            # Delivery problems never fail issuance; the code is already stored
            logger.exception("WhatsApp dispatch raised")
            return DispatchResult(delivered=False, error=str(e), code="DISPATCH_ERROR")

    def issue_otp(self, raw_phone: Optional[str]) -> IssuedOtp:
        phone = self._normalized_phone(raw_phone)

        if self.rate_limiter is not None and not self.rate_limiter.allow(
            f"otp:{self.accounts.kind}:{phone}", self.send_max_requests, self.send_window_seconds
        ):
            self._audit("otp_rate_limited", phone, success=False)
            raise RateLimitExceededError()

        code = self.code_generator()
        now = self.clock()
        expires_at = now + timedelta(minutes=self.ttl_minutes)

        # Resend: an outstanding code for this phone is replaced rather than duplicated
        existing = self.otps.find_active(phone, now, self.max_attempts)
        if existing is not None:
            record = self.otps.replace_code(existing.id, code, expires_at)
        else:
            record = self.otps.create(phone, code, expires_at)
        logger.info(f"Stored {self.accounts.kind} OTP {record.id} (resent={existing is not None})")

        dispatch = self._dispatch(phone, code)
        if not dispatch.delivered:
            logger.warning(f"OTP {record.id} stored but WhatsApp delivery failed: {dispatch.error}")

        account = self.accounts.get_by_phone(phone)
        self._audit(
            "otp_issued", phone, account.id if account else None,
            delivered=dispatch.delivered, mock=dispatch.mock, resent=existing is not None,
        )
        return IssuedOtp(
            phone_number=phone,
            expires_at=record.expires_at,
            resent=existing is not None,
            dispatch=dispatch,
            account=account,
        )

    def verify_otp(self, raw_phone: Optional[str], code: Optional[str]) -> VerifiedOtp:
        phone = self._normalized_phone(raw_phone)
        if not is_valid_otp_code(code):
            raise InvalidOtpFormatError()

        record = self.otps.find_active(phone, self.clock(), self.max_attempts, lock=True)
        if record is None:
            self._audit("otp_verify_failed", phone, success=False, reason="no_active_otp")
            raise OtpVerificationError(NO_VALID_OTP)

        if not hmac.compare_digest(record.code, code):
            attempts = self.otps.record_failed_attempt(record.id)
            self._audit("otp_verify_failed", phone, success=False, reason="mismatch", attempts=attempts)
            raise OtpVerificationError(INVALID_OTP)

        account = self.accounts.get_by_phone(phone)
        if account is not None:
            # Fail before consuming the code if tokens cannot be minted
            self.sessions.ensure_configured()

        self.otps.mark_verified(record.id)
        session = self.sessions.issue_session(account) if account is not None else None

        self._audit("otp_verified", phone, account.id if account else None, new_user=account is None)
        return VerifiedOtp(phone_number=phone, account=account, session=session)

    def purge_stale_otps(self, retention_hours: int = 24) -> int:
        cutoff = self.clock() - timedelta(hours=retention_hours)
        removed = self.otps.delete_expired_before(cutoff)
        logger.info(f"Purged {removed} OTP record(s) expired before {cutoff.isoformat()}")
        return removed
