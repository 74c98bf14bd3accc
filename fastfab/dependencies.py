# fastfab/dependencies.py
from functools import lru_cache
from typing import Dict

from fastapi import Depends
from sqlmodel import Session

from .config import Settings, get_settings
from .database import get_session
from .application.ports.account_repo import AccountRepository, CUSTOMER, SELLER
from .application.ports.audit_logger import AuditLogger
from .application.ports.message_dispatcher import MessageDispatcher
from .application.ports.rate_limiter import RateLimiter
from .application.services.nearby_service import NearbyProductsService
from .application.services.otp_service import OtpService
from .application.services.session_service import SessionService
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.messaging.gupshup_dispatcher import build_dispatcher
from .infrastructure.persistence.sqlalchemy.repositories.account_repository_sql import (
    SqlCustomerRepository, SqlSellerRepository,
)
from .infrastructure.persistence.sqlalchemy.repositories.otp_repository_sql import SqlOtpRepository
from .infrastructure.persistence.sqlalchemy.repositories.product_repository_sql import SqlProductRepository
from .infrastructure.persistence.sqlalchemy.repositories.refresh_token_repository_sql import SqlRefreshTokenRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter


# ------------------------
# Process-wide collaborators
# ------------------------
@lru_cache()
def get_dispatcher() -> MessageDispatcher:
    return build_dispatcher(get_settings())


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    s = get_settings()
    if s.REDIS_URL:
        return RedisRateLimiter(url=s.REDIS_URL)
    return InMemoryRateLimiter()


def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


# ------------------------
# Builders
# ------------------------
def account_repositories(session: Session) -> Dict[str, AccountRepository]:
    return {
        CUSTOMER: SqlCustomerRepository(session),
        SELLER: SqlSellerRepository(session),
    }


def build_session_service(session: Session, settings: Settings) -> SessionService:
    return SessionService(
        refresh_tokens=SqlRefreshTokenRepository(session),
        access_secret=settings.JWT_SECRET,
        refresh_secret=settings.JWT_REFRESH_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
        accounts=account_repositories(session),
    )


def build_otp_service(
    kind: str,
    session: Session,
    settings: Settings,
    dispatcher: MessageDispatcher,
    rate_limiter: RateLimiter = None,
    audit: AuditLogger = None,
) -> OtpService:
    return OtpService(
        otps=SqlOtpRepository(session),
        accounts=account_repositories(session)[kind],
        dispatcher=dispatcher,
        sessions=build_session_service(session, settings),
        rate_limiter=rate_limiter,
        audit=audit,
        ttl_minutes=settings.OTP_EXPIRY_MINUTES,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        send_max_requests=settings.OTP_SEND_MAX_REQUESTS,
        send_window_seconds=settings.OTP_SEND_WINDOW_SECONDS,
    )


# ------------------------
# FastAPI dependencies
# ------------------------
def get_session_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> SessionService:
    return build_session_service(session, settings)


def get_customer_otp_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    audit: AuditLogger = Depends(get_audit_logger),
) -> OtpService:
    return build_otp_service(CUSTOMER, session, settings, dispatcher, rate_limiter, audit)


def get_seller_otp_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    audit: AuditLogger = Depends(get_audit_logger),
) -> OtpService:
    return build_otp_service(SELLER, session, settings, dispatcher, rate_limiter, audit)


def get_nearby_service(session: Session = Depends(get_session)) -> NearbyProductsService:
    return NearbyProductsService(products=SqlProductRepository(session))
