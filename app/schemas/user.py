from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, UUID4
from datetime import datetime


StaffRole = Literal["admin", "supervisor"]


# Properties to receive via API on staff creation (POST /auth/register)
class StaffCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8)
    role: StaffRole = "supervisor"
    admin_secret: str


# Properties returned via API
class User(BaseModel):
    id: UUID4
    email: EmailStr
    full_name: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
    user: User
