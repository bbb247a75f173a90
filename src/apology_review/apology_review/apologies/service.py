from __future__ import annotations

import threading
from typing import Optional

import structlog

from ..common.datetime_utils import format_timestamp
from ..core.constants import DEPARTMENTS
from ..core.enums import Role, ScopeDimension
from ..core.exceptions import AuthorizationError, FetchError, ValidationError
from ..users.model import Viewer
from .filters import INSTRUCTOR_ACCEPTED, STAFF_REVIEW, STATUS_FILTERS, FilterCriteria, PageProfile, apply_filters, status_counts
from .images import ImageURLResolver
from .model import Apology
from .repository import ApologyRepository
from .review import ReviewStateMachine
from .store import ApologyStore

log = structlog.get_logger(__name__)

PAGE_ROLES = {
    STAFF_REVIEW.name: {Role.STAFF},
    INSTRUCTOR_ACCEPTED.name: {Role.INSTRUCTOR},
}


class ApologyBoard:
    """One viewer's page: store, current filters and review modal."""

    def __init__(
        self,
        viewer: Viewer,
        profile: PageProfile,
        repository: ApologyRepository,
        resolver: ImageURLResolver,
    ):
        self.viewer = viewer
        self.profile = profile
        self.store = ApologyStore(viewer)
        self.review = ReviewStateMachine(viewer, self.store, repository)
        self.criteria = FilterCriteria()
        self._repository = repository
        self._resolver = resolver

    def refresh(self) -> None:
        try:
            records = self._repository.list_apologies(scope=self.store.scope)
        except FetchError as e:
            self.store.fail(str(e) or "Failed to fetch apologies")
            log.error("apology_fetch_failed", viewer_id=self.viewer.user_id, page=self.profile.name, error=str(e))
            raise
        self.store.load(records)

    def ensure_loaded(self, *, force: bool = False) -> None:
        if force or not self.store.loaded:
            self.refresh()

    def visible(self) -> list[Apology]:
        return apply_filters(self.store.records, self.profile, self.criteria)

    def open(self, apology_id: str) -> Apology:
        record = self.store.get(apology_id)
        if record is None:
            raise ValidationError("Apology not found")
        self.review.select(record)
        return record

    def scope_options(self) -> list[str]:
        if self.profile.scope_dimension == ScopeDimension.COURSE:
            # Instructors pick from their own courses, not from what loaded.
            return sorted(set(self.viewer.courses)) or self.store.course_names()
        known = list(DEPARTMENTS)
        return known + [d for d in self.store.departments() if d not in known]

    def snapshot(self) -> dict:
        visible = self.visible()
        base = self.store.records
        if self.profile.required_status is not None:
            base = tuple(r for r in base if r.status == self.profile.required_status)
        return {
            "page": self.profile.name,
            "filters": {
                "status": self.criteria.status,
                self.profile.scope_dimension.value: self.criteria.scope,
                "q": self.criteria.search,
            },
            "status_options": list(STATUS_FILTERS),
            "scope_options": self.scope_options(),
            "total": len(visible),
            "status_counts": status_counts(base),
            "apologies": [self.to_ui(a) for a in visible],
            "review": self.review.snapshot(),
            "error": self.store.error,
        }

    def to_ui(self, a: Apology) -> dict:
        return {
            "id": a.apology_id,
            "student": {
                "name": a.student.name,
                "email": a.student.email,
                "level": a.student.level,
                "department": a.student.department,
            },
            "course_name": a.course.course_name,
            "description": a.description,
            "status": a.status.value,
            "reason": a.reason or "",
            "image_url": self._resolver.resolve(a.attachment),
            "placeholder_url": self._resolver.placeholder_url,
            "created_at": format_timestamp(a.created_at),
            "seen_at": format_timestamp(a.seen_at) if a.seen_at else None,
            "seen_by_staff": a.seen_by_staff,
        }


class ApologyReviewService:
    """Keeps one board per (viewer, page) for the lifetime of the process."""

    def __init__(self, repository: ApologyRepository, resolver: ImageURLResolver):
        self._repository = repository
        self._resolver = resolver
        self._boards: dict[tuple[int, str], ApologyBoard] = {}
        self._lock = threading.Lock()

    @property
    def resolver(self) -> ImageURLResolver:
        return self._resolver

    def board_for(self, viewer: Viewer, profile: PageProfile) -> ApologyBoard:
        if viewer.role not in PAGE_ROLES.get(profile.name, set()):
            raise AuthorizationError("You do not have access to this page")

        key = (viewer.user_id, profile.name)
        with self._lock:
            board = self._boards.get(key)
            # A new login with another role or course list gets a fresh board.
            if board is None or board.viewer != viewer:
                board = ApologyBoard(viewer, profile, self._repository, self._resolver)
                self._boards[key] = board
            return board

    def page(
        self,
        viewer: Viewer,
        profile: PageProfile,
        criteria: Optional[FilterCriteria] = None,
        *,
        refresh: bool = False,
    ) -> ApologyBoard:
        board = self.board_for(viewer, profile)
        if criteria is not None:
            board.criteria = criteria
        board.ensure_loaded(force=refresh)
        return board

    def profile_for(self, viewer: Viewer) -> PageProfile:
        return STAFF_REVIEW if viewer.role == Role.STAFF else INSTRUCTOR_ACCEPTED
