from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..core.constants import SCOPE_FILTER_ALL, STATUS_FILTER_ALL
from ..core.enums import ApologyStatus, ScopeDimension
from ..core.exceptions import ValidationError
from .model import Apology

Predicate = Callable[[Apology], bool]

STATUS_FILTERS = (STATUS_FILTER_ALL,) + tuple(s.value for s in ApologyStatus)


@dataclass(frozen=True)
class PageProfile:
    """How one dashboard page filters: its scope dimension, the fields the
    search box looks at, and an optional status every record must have."""

    name: str
    scope_dimension: ScopeDimension
    search_course: bool
    required_status: Optional[ApologyStatus] = None


STAFF_REVIEW = PageProfile(
    name="staff_review",
    scope_dimension=ScopeDimension.DEPARTMENT,
    search_course=False,
)

INSTRUCTOR_ACCEPTED = PageProfile(
    name="instructor_accepted",
    scope_dimension=ScopeDimension.COURSE,
    search_course=True,
    required_status=ApologyStatus.ACCEPTED,
)


@dataclass(frozen=True)
class FilterCriteria:
    status: str = STATUS_FILTER_ALL
    scope: str = SCOPE_FILTER_ALL
    search: str = ""

    def __post_init__(self):
        if self.status not in STATUS_FILTERS:
            raise ValidationError(f"Unknown status filter: {self.status!r}")

    @classmethod
    def from_args(cls, args: Mapping[str, str], profile: PageProfile) -> "FilterCriteria":
        status = (args.get("status") or STATUS_FILTER_ALL).strip().lower()
        scope = (args.get(profile.scope_dimension.value) or SCOPE_FILTER_ALL).strip()
        if scope.lower() == SCOPE_FILTER_ALL:
            scope = SCOPE_FILTER_ALL
        return cls(status=status, scope=scope, search=args.get("q") or "")


def build_predicates(profile: PageProfile, criteria: FilterCriteria) -> list[Predicate]:
    preds: list[Predicate] = []

    if profile.required_status is not None:
        required = profile.required_status
        preds.append(lambda a: a.status == required)

    if criteria.status != STATUS_FILTER_ALL:
        wanted = ApologyStatus(criteria.status)
        preds.append(lambda a: a.status == wanted)

    if criteria.scope != SCOPE_FILTER_ALL:
        value = criteria.scope.lower()
        if profile.scope_dimension == ScopeDimension.COURSE:
            preds.append(lambda a: value in a.course.course_name.lower())
        else:
            preds.append(lambda a: (a.student.department or "").lower() == value)

    query = criteria.search.strip().lower()
    if query:
        include_course = profile.search_course

        def _matches(a: Apology) -> bool:
            fields = [a.student.name, a.student.email]
            if include_course:
                fields.append(a.course.course_name)
            return any(query in (f or "").lower() for f in fields)

        preds.append(_matches)

    return preds


def apply_filters(records: Sequence[Apology], profile: PageProfile, criteria: FilterCriteria) -> list[Apology]:
    """Single pass, order preserving, no side effects."""
    preds = build_predicates(profile, criteria)
    return [r for r in records if all(p(r) for p in preds)]


def status_counts(records: Iterable[Apology]) -> dict[str, int]:
    counts = Counter(r.status.value for r in records)
    out = {s.value: counts.get(s.value, 0) for s in ApologyStatus}
    out[STATUS_FILTER_ALL] = sum(out.values())
    return out
