from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

import structlog

from ..common.datetime_utils import parse_timestamp
from ..common.validators import optional_text, require_non_empty
from ..core.enums import ApologyStatus, Role
from ..core.exceptions import TimestampFormatError, ValidationError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StudentRef:
    name: str
    email: str
    level: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class CourseRef:
    course_name: str


@dataclass(frozen=True)
class Apology:
    """A student's absence justification.

    Only ``status``, ``reason`` and the decision fields ever change after
    submission; everything else is a read-only snapshot.
    """

    apology_id: str
    student: StudentRef
    course: CourseRef
    description: str
    status: ApologyStatus
    created_at: Optional[datetime]
    reason: Optional[str] = None
    attachment: Optional[str] = None
    seen_at: Optional[datetime] = None
    seen_by_staff: bool = False
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApologyStatus.PENDING

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Apology":
        """Build from the JSON shape served by the apologies API."""
        apology_id = data.get("_id") or data.get("id")
        if not apology_id:
            raise ValidationError("Apology payload has no id")

        student = data.get("student") or {}
        course = data.get("course") or {}
        try:
            status = ApologyStatus(str(data.get("status") or ApologyStatus.PENDING.value).lower())
        except ValueError:
            raise ValidationError(f"Unknown apology status: {data.get('status')!r}")

        return cls(
            apology_id=str(apology_id),
            student=StudentRef(
                name=str(student.get("name") or ""),
                email=str(student.get("email") or ""),
                level=_opt_str(student.get("level")),
                department=_opt_str(student.get("department")),
            ),
            course=CourseRef(course_name=str(course.get("courseName") or "")),
            description=require_non_empty(data.get("description") or "", "Description"),
            status=status,
            created_at=_timestamp_or_none(data.get("createdAt"), str(apology_id), "createdAt"),
            reason=optional_text(data.get("reason")),
            attachment=data.get("attachment") or data.get("image") or None,
            seen_at=_timestamp_or_none(data.get("seenAt"), str(apology_id), "seenAt"),
            seen_by_staff=bool(data.get("seenByStaff")),
            decided_by=_decider_or_none(data.get("decidedBy"), str(apology_id)),
            decided_at=_timestamp_or_none(data.get("decidedAt"), str(apology_id), "decidedAt"),
        )


@dataclass(frozen=True)
class ApologyScope:
    """Which apologies a viewer may see at all.

    ``None`` means unrestricted for that dimension.
    """

    statuses: Optional[frozenset[ApologyStatus]] = None
    course_names: Optional[frozenset[str]] = None

    @classmethod
    def for_viewer(cls, viewer) -> "ApologyScope":
        if viewer.role == Role.STAFF:
            return cls()
        return cls(
            statuses=frozenset({ApologyStatus.ACCEPTED}),
            course_names=frozenset(c.lower() for c in viewer.courses),
        )

    def matches(self, apology: Apology) -> bool:
        if self.statuses is not None and apology.status not in self.statuses:
            return False
        if self.course_names is not None and apology.course.course_name.lower() not in self.course_names:
            return False
        return True


def _opt_str(v: Any) -> Optional[str]:
    return None if v is None or v == "" else str(v)


def _decider_or_none(value: Any, apology_id: str) -> Optional[int]:
    # Document stores send an object id here; only numeric user ids are kept.
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        log.warning("apology_decider_rejected", apology_id=apology_id, value=str(value))
        return None


def _timestamp_or_none(value: Any, apology_id: str, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return parse_timestamp(value)
    except TimestampFormatError:
        log.warning("apology_timestamp_rejected", apology_id=apology_id, field=field_name, value=value)
        return None
