from pydantic import BaseModel, ConfigDict, EmailStr
from datetime import datetime
from typing import Optional

from app.core.constants import RoleEnum

class UserBase(BaseModel):
    name: Optional[str] = None
    email: EmailStr
    role: RoleEnum = RoleEnum.INVESTOR

class UserCreate(UserBase):
    disabled: bool = False

class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[RoleEnum] = None
    disabled: Optional[bool] = None

class User(UserBase):
    id: str
    disabled: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
