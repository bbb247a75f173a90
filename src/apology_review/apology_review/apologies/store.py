from __future__ import annotations

import dataclasses
import threading
from typing import Any, Iterable, Mapping, Optional

import structlog

from ..core.exceptions import ValidationError
from ..users.model import Viewer
from .model import Apology, ApologyScope

log = structlog.get_logger(__name__)

PATCHABLE_FIELDS = frozenset({"status", "reason", "decided_by", "decided_at"})


class ApologyStore:
    """Authoritative in-memory snapshot of the apologies one viewer can see.

    Filters and views only read from here; the only mutations are a
    wholesale ``load`` and a single-record ``patch`` after a decision.
    A board is shared by request threads, so both take the store lock.
    """

    def __init__(self, viewer: Viewer, scope: Optional[ApologyScope] = None):
        self._viewer = viewer
        self._scope = scope or ApologyScope.for_viewer(viewer)
        self._records: list[Apology] = []
        self._error: Optional[str] = None
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def viewer(self) -> Viewer:
        return self._viewer

    @property
    def scope(self) -> ApologyScope:
        return self._scope

    @property
    def records(self) -> tuple[Apology, ...]:
        with self._lock:
            return tuple(self._records)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, records: Iterable[Apology]) -> None:
        """Replace the collection with a fresh fetch (replace, not merge)."""
        fresh = [r for r in records if self._scope.matches(r)]
        with self._lock:
            self._records = fresh
            self._error = None
            self._loaded = True
        log.debug("apology_store_loaded", viewer_id=self._viewer.user_id, count=len(fresh))

    def fail(self, error: str) -> None:
        """Record a failed fetch. Previous data is dropped, not shown as fresh."""
        with self._lock:
            self._records = []
            self._error = error
            self._loaded = False

    def get(self, apology_id: str) -> Optional[Apology]:
        with self._lock:
            records = self._records
        for r in records:
            if r.apology_id == str(apology_id):
                return r
        return None

    def patch(self, apology_id: str, changes: Mapping[str, Any]) -> bool:
        """Update one record in place. Unknown ids are ignored (returns False).

        A concurrent reload may have removed the record before a decision
        resolved, so a missing id is not an error.
        """
        illegal = set(changes) - PATCHABLE_FIELDS
        if illegal:
            raise ValidationError(f"Fields cannot be changed: {', '.join(sorted(illegal))}")

        with self._lock:
            records = self._records
            for i, r in enumerate(records):
                if r.apology_id == str(apology_id):
                    records[i] = dataclasses.replace(r, **changes)
                    return True

        log.info("apology_patch_skipped", apology_id=str(apology_id), reason="not_loaded")
        return False

    def course_names(self) -> list[str]:
        return _unique(r.course.course_name for r in self.records)

    def departments(self) -> list[str]:
        return _unique((r.student.department or "").upper() for r in self.records)


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        if v and v not in seen:
            seen[v] = None
    return list(seen)
