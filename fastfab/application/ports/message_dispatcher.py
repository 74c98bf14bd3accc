from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class DispatchResult:
    delivered: bool
    mock: bool = False
    error: Optional[str] = None
    code: Optional[str] = None


class MessageDispatcher(Protocol):
    def send_otp(self, phone_number: str, code: str) -> DispatchResult:
        ...
