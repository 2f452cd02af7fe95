"""Principal abstraction for the authenticated caller of a booking operation."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import RoleName


@dataclass(frozen=True)
class Actor:
    """Authenticated user on whose behalf an operation runs.

    Resolved by the calling boundary (token parsing lives outside this
    package) and passed explicitly into every lifecycle operation.
    """

    user_id: int
    role: RoleName

    @property
    def is_host(self) -> bool:
        return self.role == RoleName.HOST

    @property
    def is_seeker(self) -> bool:
        return self.role == RoleName.SEEKER
