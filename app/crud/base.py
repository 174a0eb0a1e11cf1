from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import Base
from ..exceptions import raises_unavailable
from ..services.filters import Filter

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Async data access for one model.

    Queries take a `Filter` from app.services.filters; ordering, paging
    and eager-load options are passed straight to the SELECT.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _select(self, flt: Optional[Filter] = None, options: Sequence[Any] = ()):
        stmt = select(self.model)
        if flt:
            stmt = stmt.where(*flt.clauses(self.model))
        if options:
            stmt = stmt.options(*options)
        return stmt

    @raises_unavailable
    async def find(
        self,
        db: AsyncSession,
        flt: Optional[Filter] = None,
        *,
        order_by: Sequence[Any] = (),
        skip: int = 0,
        limit: Optional[int] = None,
        options: Sequence[Any] = (),
    ) -> List[ModelType]:
        stmt = self._select(flt, options)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @raises_unavailable
    async def find_one(
        self, db: AsyncSession, flt: Filter, *, options: Sequence[Any] = ()
    ) -> Optional[ModelType]:
        result = await db.execute(self._select(flt, options).limit(1))
        return result.scalars().first()

    @raises_unavailable
    async def find_by_id(
        self, db: AsyncSession, id: Any, *, options: Sequence[Any] = (), fresh: bool = False
    ) -> Optional[ModelType]:
        stmt = select(self.model).where(self.model.id == id)
        if options:
            stmt = stmt.options(*options)
        if fresh:
            # reload attributes already present in the identity map
            stmt = stmt.execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @raises_unavailable
    async def create(
        self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        fields = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**fields)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    @raises_unavailable
    async def find_by_id_and_update(
        self,
        db: AsyncSession,
        id: Any,
        *,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
    ) -> Optional[ModelType]:
        db_obj = await self.find_by_id(db, id)
        if db_obj is None:
            return None

        fields = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for name, value in fields.items():
            setattr(db_obj, name, value)

        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    @raises_unavailable
    async def find_by_id_and_delete(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        db_obj = await self.find_by_id(db, id)
        if db_obj is None:
            return None

        await db.delete(db_obj)
        await db.commit()
        return db_obj
