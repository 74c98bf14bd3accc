from typing import Optional, Dict, Any, Protocol


class AuditLogger(Protocol):
    def log(self, action: str, phone: str, account_id: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        """Record an OTP/session event. Implementations must not store the raw phone or any code."""
        ...
