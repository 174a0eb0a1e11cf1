from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from ..crud.base import CRUDBase
from ..exceptions import raises_unavailable
from ..models.message import Message
from ..schemas.message import MessageCreate, MessageUpdate

class CRUDMessage(CRUDBase[Message, MessageCreate, MessageUpdate]):
    @raises_unavailable
    async def list_recent(self, db: AsyncSession, *, skip: int = 0, limit: int = 10) -> List[Message]:
        return await self.find(
            db,
            order_by=(Message.time.desc(), Message.id.desc()),
            skip=skip,
            limit=limit,
            options=(selectinload(Message.author),),
        )

message = CRUDMessage(Message)
