# fastfab/routers/otp_router.py
import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from ..application.ports.account_repo import SELLER
from ..application.services.otp_service import IssuedOtp, OtpService, VerifiedOtp
from ..config import Settings, get_settings
from ..cookies import set_session_cookies
from ..dependencies import get_customer_otp_service, get_seller_otp_service
from ..exceptions import AppError, create_error_response
from ..schemas import ErrorResponse, SendOTPRequest, SendOTPResponse, VerifyOTPRequest, VerifyOTPResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["WhatsApp OTP"], responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})

SENT_MESSAGE = "OTP sent successfully to your WhatsApp number"
DELAYED_MESSAGE = "OTP generated but WhatsApp delivery may be delayed"
MOCK_MESSAGE = "OTP generated (WhatsApp delivery is not configured)"


def _send_response(issued: IssuedOtp, kind: str) -> SendOTPResponse:
    dispatch = issued.dispatch
    if not dispatch.delivered:
        body = SendOTPResponse(
            message=DELAYED_MESSAGE,
            expiresAt=issued.expires_at,
            warning="WhatsApp message could not be delivered. Please retry if you do not receive the OTP.",
            sendError=dispatch.error,
            code=dispatch.code,
        )
    else:
        body = SendOTPResponse(
            message=MOCK_MESSAGE if dispatch.mock else SENT_MESSAGE,
            expiresAt=issued.expires_at,
        )

    account = issued.account
    if kind == SELLER:
        body.isExistingSeller = account is not None
        body.isSellerProfileComplete = bool(account and account.profile_complete)
    else:
        body.isExistingUser = account is not None
    return body


def _verify(
    payload: VerifyOTPRequest,
    response: Response,
    service: OtpService,
    settings: Settings,
):
    try:
        result: VerifiedOtp = service.verify_otp(payload.get_phone(), payload.get_code())
    except AppError as e:
        logger.info(f"OTP verification rejected ({e.status_code}): {e.message}")
        # Verification failures carry verified=false alongside the usual shape
        return JSONResponse(
            status_code=e.status_code,
            content=create_error_response(e.message, verified=False, **e.extra),
        )

    if result.session is not None:
        set_session_cookies(response, result.session, settings)
        return VerifyOTPResponse(
            message="Login successful",
            isNewUser=False,
            userId=result.account.id,
        )
    return VerifyOTPResponse(
        message="OTP verified successfully",
        isNewUser=True,
        userId=None,
    )


# ------------------------
# Customer flow
# ------------------------
@router.post("/whatsapp-otp/send", response_model=SendOTPResponse, response_model_exclude_none=True)
def send_customer_otp(payload: SendOTPRequest, service: OtpService = Depends(get_customer_otp_service)):
    issued = service.issue_otp(payload.get_phone())
    return _send_response(issued, service.accounts.kind)


@router.post("/whatsapp-otp/verify", response_model=VerifyOTPResponse)
def verify_customer_otp(
    payload: VerifyOTPRequest,
    response: Response,
    service: OtpService = Depends(get_customer_otp_service),
    settings: Settings = Depends(get_settings),
):
    return _verify(payload, response, service, settings)


# ------------------------
# Seller flow
# ------------------------
@router.post("/seller-whatsapp-otp/send", response_model=SendOTPResponse, response_model_exclude_none=True)
def send_seller_otp(payload: SendOTPRequest, service: OtpService = Depends(get_seller_otp_service)):
    issued = service.issue_otp(payload.get_phone())
    return _send_response(issued, service.accounts.kind)


@router.post("/seller/auth/verify-otp", response_model=VerifyOTPResponse)
def verify_seller_otp(
    payload: VerifyOTPRequest,
    response: Response,
    service: OtpService = Depends(get_seller_otp_service),
    settings: Settings = Depends(get_settings),
):
    return _verify(payload, response, service, settings)
