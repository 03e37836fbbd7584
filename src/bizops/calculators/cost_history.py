"""Historical cost lookup by effective date."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.models import ProductCostHistory, ShippingCostHistory
from bizops.timeutil import end_of_business_day

UTC = ZoneInfo("UTC")


class CostHistoryResolver:
    """Resolves product and shipping costs in effect on a date.

    A row applies when its ``effective_from`` is at or before the end of the
    order date in the business time zone. The latest such row wins.
    """

    def __init__(self, session: AsyncSession, tz: str | None = None):
        self.session = session
        self.tz = tz

    def _cutoff(self, on_date: date):
        # SQLite drops tzinfo; compare in UTC
        return end_of_business_day(on_date, self.tz).astimezone(UTC)

    async def product_cost(self, product_id: UUID, on_date: date) -> Decimal | None:
        result = await self.session.execute(
            select(ProductCostHistory.cost)
            .where(ProductCostHistory.product_id == product_id)
            .where(ProductCostHistory.effective_from <= self._cutoff(on_date))
            .order_by(ProductCostHistory.effective_from.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def shipping_cost(
        self,
        tenant_id: UUID,
        customer_id: UUID,
        on_date: date,
    ) -> Decimal | None:
        result = await self.session.execute(
            select(ShippingCostHistory.shipping_cost)
            .where(ShippingCostHistory.tenant_id == tenant_id)
            .where(ShippingCostHistory.customer_id == customer_id)
            .where(ShippingCostHistory.effective_from <= self._cutoff(on_date))
            .order_by(ShippingCostHistory.effective_from.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
