from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Viewer role used for scoping and permissions."""

    STAFF = "staff"
    INSTRUCTOR = "instructor"


class ApologyStatus(str, Enum):
    """Lifecycle of an apology. ACCEPTED and REJECTED are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApologyStatus.PENDING


class ReviewState(str, Enum):
    IDLE = "idle"
    VIEWING = "viewing"
    SUBMITTING = "submitting"


class ScopeDimension(str, Enum):
    """Which scope filter a page exposes (exactly one per page)."""

    DEPARTMENT = "department"
    COURSE = "course"
