# fastfab/db/models/auth/otp.py
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....utils import utcnow

class WhatsAppOTP(SQLModel, table=True):
    __tablename__ = "whatsapp_otps"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    phone_number: str = Field(max_length=20, index=True)
    code: str = Field(max_length=6)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True), index=True)
    verified: bool = Field(default=False)
    attempts: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
