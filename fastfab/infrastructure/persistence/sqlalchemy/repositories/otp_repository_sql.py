from datetime import datetime
from typing import Optional
from sqlmodel import Session, select

from .....db.models import WhatsAppOTP
from .....application.ports.otp_repo import OtpRepository, OtpDto
from .....utils import as_utc, utcnow


class SqlOtpRepository(OtpRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, rec: WhatsAppOTP) -> OtpDto:
        return OtpDto(
            id=rec.id,
            phone_number=rec.phone_number,
            code=rec.code,
            expires_at=as_utc(rec.expires_at),
            verified=rec.verified,
            attempts=rec.attempts,
            created_at=as_utc(rec.created_at),
        )

    def _get(self, otp_id: str) -> WhatsAppOTP:
        rec = self.session.get(WhatsAppOTP, otp_id)
        if rec is None:
            raise LookupError(f"OTP record {otp_id} not found")
        return rec

    def find_active(self, phone_number: str, now: datetime, max_attempts: int = 0, lock: bool = False) -> Optional[OtpDto]:
        stmt = select(WhatsAppOTP).where(
            WhatsAppOTP.phone_number == phone_number,
            WhatsAppOTP.expires_at > as_utc(now),
            WhatsAppOTP.verified == False,  # noqa: E712
        )
        if max_attempts > 0:
            stmt = stmt.where(WhatsAppOTP.attempts < max_attempts)
        stmt = stmt.order_by(WhatsAppOTP.created_at.desc())
        if lock:
            # Postgres holds the row until the caller commits; SQLite ignores it
            stmt = stmt.with_for_update()
        rec = self.session.exec(stmt).first()
        return self._to_dto(rec) if rec else None

    def create(self, phone_number: str, code: str, expires_at: datetime) -> OtpDto:
        rec = WhatsAppOTP(phone_number=phone_number, code=code, expires_at=as_utc(expires_at))
        self.session.add(rec)
        self.session.commit()
        self.session.refresh(rec)
        return self._to_dto(rec)

    def replace_code(self, otp_id: str, code: str, expires_at: datetime) -> OtpDto:
        rec = self._get(otp_id)
        rec.code = code
        rec.expires_at = as_utc(expires_at)
        rec.attempts = 0
        rec.updated_at = utcnow()
        self.session.add(rec)
        self.session.commit()
        self.session.refresh(rec)
        return self._to_dto(rec)

    def mark_verified(self, otp_id: str) -> None:
        rec = self._get(otp_id)
        rec.verified = True
        rec.updated_at = utcnow()
        self.session.add(rec)
        self.session.commit()

    def record_failed_attempt(self, otp_id: str) -> int:
        rec = self._get(otp_id)
        rec.attempts += 1
        rec.updated_at = utcnow()
        self.session.add(rec)
        self.session.commit()
        return rec.attempts

    def delete_expired_before(self, cutoff: datetime) -> int:
        stale = self.session.exec(
            select(WhatsAppOTP).where(WhatsAppOTP.expires_at < as_utc(cutoff))
        ).all()
        for rec in stale:
            self.session.delete(rec)
        self.session.commit()
        return len(stale)
