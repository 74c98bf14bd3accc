from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass
class OtpDto:
    id: str
    phone_number: str
    code: str
    expires_at: datetime
    verified: bool
    attempts: int
    created_at: datetime


class OtpRepository(Protocol):
    def find_active(self, phone_number: str, now: datetime, max_attempts: int = 0, lock: bool = False) -> Optional[OtpDto]:
        """Most recent unverified, unexpired record for the phone, if any."""
        ...

    def create(self, phone_number: str, code: str, expires_at: datetime) -> OtpDto:
        ...

    def replace_code(self, otp_id: str, code: str, expires_at: datetime) -> OtpDto:
        ...

    def mark_verified(self, otp_id: str) -> None:
        ...

    def record_failed_attempt(self, otp_id: str) -> int:
        ...

    def delete_expired_before(self, cutoff: datetime) -> int:
        ...
