# fastfab/schemas/common/common.py
from pydantic import BaseModel

class ErrorResponse(BaseModel):
    success: bool = False
    message: str

class MessageResponse(BaseModel):
    success: bool = True
    message: str
