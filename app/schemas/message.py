from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from .user import MessageAuthor

class MessageCreate(BaseModel):
    author_id: int
    body: str

class MessageUpdate(BaseModel):
    body: Optional[str] = None

class Message(BaseModel):
    id: int
    body: str
    time: datetime
    author: Optional[MessageAuthor] = None

    class Config:
        from_attributes = True
