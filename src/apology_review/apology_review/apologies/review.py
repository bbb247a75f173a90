from __future__ import annotations

import threading
from typing import Callable, Optional

import structlog

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_decision_status
from ..core.enums import ApologyStatus, ReviewState
from ..core.exceptions import AuthorizationError, DecisionConflictError, DecisionError, IllegalTransitionError
from ..users.model import Viewer
from .model import Apology
from .repository import ApologyRepository
from .store import ApologyStore

log = structlog.get_logger(__name__)


class ReviewStateMachine:
    """Drives the review modal for one viewer.

    IDLE --select--> VIEWING --decide--> SUBMITTING --ok--> IDLE
                                                    --fail--> VIEWING (error set)

    The store is patched only after the backing service confirmed the
    decision; a failed submit leaves it untouched and keeps the draft so the
    viewer can retry.
    """

    def __init__(
        self,
        viewer: Viewer,
        store: ApologyStore,
        repository: ApologyRepository,
        *,
        clock: Callable = now_local,
    ):
        self._viewer = viewer
        self._store = store
        self._repository = repository
        self._clock = clock
        self._lock = threading.Lock()

        self._state = ReviewState.IDLE
        self._selected: Optional[Apology] = None
        self._draft = ""
        self._error: Optional[str] = None
        self._conflict = False

    @property
    def state(self) -> ReviewState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def conflict(self) -> bool:
        """True when the last failure was "already decided elsewhere"."""
        return self._conflict

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def selected(self) -> Optional[Apology]:
        # Prefer the store's copy so a reload or patch is reflected.
        if self._selected is None:
            return None
        return self._store.get(self._selected.apology_id) or self._selected

    @property
    def can_decide(self) -> bool:
        record = self.selected
        return (
            self._state == ReviewState.VIEWING
            and self._viewer.can_review
            and record is not None
            and record.is_pending
        )

    def select(self, record: Apology) -> None:
        with self._lock:
            if self._state == ReviewState.SUBMITTING:
                raise IllegalTransitionError("A decision is still being submitted")
            self._selected = record
            self._draft = record.reason or ""
            self._error = None
            self._conflict = False
            self._state = ReviewState.VIEWING

    def update_draft(self, text: str) -> None:
        with self._lock:
            if self._state != ReviewState.VIEWING:
                raise IllegalTransitionError("No apology is open for review")
            self._draft = text or ""

    def close(self) -> None:
        with self._lock:
            if self._state == ReviewState.SUBMITTING:
                raise IllegalTransitionError("A decision is still being submitted")
            self._reset()

    def decide(self, status: ApologyStatus | str, reason: Optional[str] = None) -> bool:
        """Submit a decision for the selected apology.

        Returns True when the decision was recorded and the store patched,
        False when the backing service refused it (``error`` is then set).
        """
        new_status = require_decision_status(status)

        with self._lock:
            if not self._viewer.can_review:
                raise AuthorizationError("Only staff can accept or reject apologies")
            if self._state == ReviewState.SUBMITTING:
                raise IllegalTransitionError("A decision is already being submitted")
            if self._state != ReviewState.VIEWING:
                raise IllegalTransitionError("No apology is open for review")
            record = self.selected
            if record is None or not record.is_pending:
                raise IllegalTransitionError("This apology has already been decided")

            if reason is not None:
                self._draft = reason
            draft = optional_text(self._draft)
            self._error = None
            self._conflict = False
            self._state = ReviewState.SUBMITTING

        try:
            updated = self._repository.submit_decision(
                apology_id=record.apology_id,
                status=new_status,
                reason=draft,
                decided_by=self._viewer.user_id,
            )
        except DecisionError as e:
            with self._lock:
                self._state = ReviewState.VIEWING
                self._error = str(e) or "Failed to update apology status."
                self._conflict = isinstance(e, DecisionConflictError)
            log.warning(
                "apology_decision_failed",
                apology_id=record.apology_id,
                status=new_status.value,
                conflict=self._conflict,
                error=str(e),
            )
            return False
        except Exception:
            with self._lock:
                self._state = ReviewState.VIEWING
                self._error = "Failed to update apology status."
            raise

        self._store.patch(
            record.apology_id,
            {
                "status": new_status,
                "reason": draft,
                "decided_by": (updated.decided_by if updated and updated.decided_by is not None else self._viewer.user_id),
                "decided_at": (updated.decided_at if updated and updated.decided_at else self._clock()),
            },
        )
        log.info("apology_decided", apology_id=record.apology_id, status=new_status.value, viewer_id=self._viewer.user_id)

        with self._lock:
            self._reset()
        return True

    def snapshot(self) -> dict:
        record = self.selected
        return {
            "state": self._state.value,
            "apology_id": record.apology_id if record else None,
            "draft_reason": self._draft,
            "error": self._error,
            "conflict": self._conflict,
            "can_decide": self.can_decide,
        }

    def _reset(self) -> None:
        self._state = ReviewState.IDLE
        self._selected = None
        self._draft = ""
        self._error = None
        self._conflict = False
