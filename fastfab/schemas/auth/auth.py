# fastfab/schemas/auth/auth.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


def _numbers_as_text(value):
    # clients sometimes post the phone or code as a JSON number
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class SendOTPRequest(BaseModel):
    phoneNumber: Optional[str] = Field(None, description="Phone number, 10 digits or with country code")
    phone: Optional[str] = Field(None, description="Alias of phoneNumber")

    @field_validator("phoneNumber", "phone", mode="before")
    @classmethod
    def coerce_phone(cls, v):
        return _numbers_as_text(v)

    def get_phone(self) -> Optional[str]:
        return self.phoneNumber or self.phone

class SendOTPResponse(BaseModel):
    success: bool = True
    message: str
    expiresAt: datetime
    warning: Optional[str] = None
    sendError: Optional[str] = None
    code: Optional[str] = None
    isExistingUser: Optional[bool] = None
    isExistingSeller: Optional[bool] = None
    isSellerProfileComplete: Optional[bool] = None

class VerifyOTPRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number (new format)")
    phoneNumber: Optional[str] = Field(None, description="Phone number (old format)")
    code: Optional[str] = Field(None, description="6-digit OTP (new format)")
    otpCode: Optional[str] = Field(None, description="6-digit OTP (old format)")

    @field_validator("phone", "phoneNumber", "code", "otpCode", mode="before")
    @classmethod
    def coerce_fields(cls, v):
        return _numbers_as_text(v)

    def get_phone(self) -> Optional[str]:
        return self.phone or self.phoneNumber

    def get_code(self) -> Optional[str]:
        return self.code or self.otpCode

class VerifyOTPResponse(BaseModel):
    success: bool = True
    message: str
    verified: bool = True
    isNewUser: bool
    userId: Optional[str] = None

class RefreshRequest(BaseModel):
    refreshToken: Optional[str] = None

class RefreshResponse(BaseModel):
    success: bool = True
    message: str
    accessToken: str
