from pydantic import BaseModel, EmailStr
from typing import Optional

class UserBase(BaseModel):
    username: str
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None
    admin: bool = False

class UserCreate(UserBase):
    pass

class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None
    admin: Optional[bool] = None

class MessageAuthor(BaseModel):
    """Public projection of a user attached to chat messages"""
    id: int
    username: str
    avatar: Optional[str] = None
    admin: bool

    class Config:
        from_attributes = True
