"""Client-side session state: who is signed in and which tenant is active."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from bizops.errors import ForbiddenError

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Credentials and tenant selection passed explicitly to API calls.

    ``generation`` increases on every login, tenant switch and logout.
    Cached lookups are keyed to the tenant and are dropped at each of those
    points, so data from one tenant is never served under another.
    """

    token: str | None = None
    user_name: str | None = None
    active_tenant_id: UUID | None = None
    generation: int = 0
    cache: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.active_tenant_id is not None:
            headers["X-Tenant-ID"] = str(self.active_tenant_id)
        return headers

    def _invalidate(self) -> None:
        self.generation += 1
        self.cache.clear()

    def login(self, token: str, user_name: str | None = None, tenant_id: UUID | None = None) -> None:
        self.token = token
        self.user_name = user_name
        self.active_tenant_id = tenant_id
        self._invalidate()
        logger.info("Signed in as %s", user_name)

    def switch_tenant(self, tenant_id: UUID) -> None:
        self.active_tenant_id = tenant_id
        self._invalidate()
        logger.info("Switched to tenant %s", tenant_id)

    def logout(self) -> None:
        self.token = None
        self.user_name = None
        self.active_tenant_id = None
        self._invalidate()

    def require_tenant(self) -> UUID:
        """Active tenant id; raises ForbiddenError when none is selected."""
        if self.active_tenant_id is None:
            raise ForbiddenError("No active tenant selected")
        return self.active_tenant_id
