from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

import structlog

from ..core.enums import Role
from ..core.exceptions import AuthorizationError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Viewer:
    """Who is looking at the dashboard.

    Built once per request from the session (set by the external login
    flow) and handed explicitly to stores and review machines.
    """

    user_id: int
    full_name: str
    role: Role
    courses: tuple[str, ...] = field(default_factory=tuple)

    @property
    def can_review(self) -> bool:
        return self.role == Role.STAFF

    @classmethod
    def from_session(cls, session: Mapping) -> "Viewer":
        """Build the viewer from the login session.

        Expected keys: ``user_id`` (numeric), ``role`` (``staff`` or
        ``instructor``), ``name`` and, for instructors, ``courses``: the
        course names they teach. Instructor pages only show accepted
        apologies for those courses, so an instructor session without
        ``courses`` sees an empty page.
        """
        if "user_id" not in session:
            raise AuthorizationError("Not signed in")
        try:
            user_id = int(session["user_id"])
        except (TypeError, ValueError):
            raise AuthorizationError("Invalid session user")
        try:
            role = Role(session.get("role"))
        except ValueError:
            raise AuthorizationError("Unknown role")

        courses = tuple(str(c) for c in (session.get("courses") or ()) if c)
        if role == Role.INSTRUCTOR and not courses:
            log.warning("instructor_session_without_courses", user_id=user_id)
        return cls(
            user_id=user_id,
            full_name=str(session.get("name") or ""),
            role=role,
            courses=courses,
        )
