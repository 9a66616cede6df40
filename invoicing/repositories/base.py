"""
Base repositories with generic CRUD operations.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional
from datetime import datetime

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from invoicing.core.pagination import create_paginated_response

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _scoped(self, query, organization_id: Optional[uuid.UUID], filters: Optional[dict]):
        # Filter by organization if model is tenant-scoped
        if organization_id and hasattr(self.model, 'organization_id'):
            query = query.where(self.model.organization_id == organization_id)

        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def list_paginated(
        self,
        organization_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> dict:
        """List records with pagination."""
        query = self._scoped(select(self.model), organization_id, filters)

        # Get total count
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.session.exec(count_query)
        total = total_result.one()

        # Apply ordering
        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        # Apply pagination
        offset = (page - 1) * limit
        query = query.offset(offset).limit(limit)

        result = await self.session.exec(query)
        items = list(result.all())

        return create_paginated_response(items, total, page, limit)

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """Update a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field) and value is not None:
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = datetime.utcnow()

        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.commit()
        return True

    async def count(
        self,
        organization_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        created_since: Optional[datetime] = None
    ) -> int:
        """Count records, optionally only those created since a point in time."""
        query = self._scoped(select(func.count()).select_from(self.model), organization_id, filters)

        if created_since is not None and hasattr(self.model, 'created_at'):
            query = query.where(self.model.created_at >= created_since)

        result = await self.session.exec(query)
        return result.one()


class TenantRepository(BaseRepository[ModelType]):
    """
    Repository for organization-owned rows that record their creator.

    ``get_owner_id`` is the ownership capability used by authorization:
    a row outside the organization has no owner as far as the caller can see.
    """

    async def get_in_organization(
        self,
        organization_id: uuid.UUID,
        id: uuid.UUID
    ) -> Optional[ModelType]:
        """Get a record by ID, only if it belongs to the organization."""
        db_obj = await self.get(id)
        if db_obj is None or db_obj.organization_id != organization_id:
            return None
        return db_obj

    async def get_owner_id(
        self,
        organization_id: uuid.UUID,
        id: uuid.UUID
    ) -> Optional[uuid.UUID]:
        """ID of the user who created the record, or None if not found."""
        query = select(self.model.user_id).where(
            self.model.id == id,
            self.model.organization_id == organization_id
        )
        result = await self.session.exec(query)
        return result.first()
