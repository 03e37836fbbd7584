"""Tests for session management."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from bizops.database import get_session, init_db
from bizops.models import Tenant


async def tenant_names() -> list[str]:
    async with get_session() as session:
        result = await session.execute(select(Tenant.name).order_by(Tenant.name))
        return list(result.scalars().all())


class TestGetSession:
    """Test the commit-or-rollback session scope."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, engine):
        init_db(engine)

        async with get_session() as session:
            session.add(Tenant(tenant_id=uuid4(), name="Kept", status="active"))

        assert await tenant_names() == ["Kept"]

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, engine):
        init_db(engine)

        with pytest.raises(RuntimeError):
            async with get_session() as session:
                session.add(Tenant(tenant_id=uuid4(), name="Dropped", status="active"))
                await session.flush()
                raise RuntimeError("boom")

        assert await tenant_names() == []

    def test_init_db_reuses_factory(self, engine):
        first = init_db(engine)
        assert init_db() == first
