"""
Subscription repository.
"""
import uuid
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.models.subscription import Subscription
from invoicing.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for Subscription operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Subscription, session)

    async def get_for_organization(self, organization_id: uuid.UUID) -> Optional[Subscription]:
        """The organization's subscription, if it has one."""
        query = select(Subscription).where(Subscription.organization_id == organization_id)
        result = await self.session.exec(query)
        return result.first()
