from __future__ import annotations

import dataclasses
from datetime import datetime

import pytest

from src.apology_review.apology_review.apologies.model import Apology, CourseRef, StudentRef
from src.apology_review.apology_review.core.enums import ApologyStatus
from src.apology_review.apology_review.core.exceptions import DecisionConflictError, DecisionError, FetchError


def build_apology(
    apology_id="1",
    *,
    name="Ali Hassan",
    email=None,
    department="CS",
    level="3",
    course="Data Structures",
    description="Hospital visit",
    status=ApologyStatus.PENDING,
    reason=None,
    attachment=None,
):
    return Apology(
        apology_id=str(apology_id),
        student=StudentRef(
            name=name,
            email=email or f"{name.split()[0].lower()}{apology_id}@uni.test",
            level=level,
            department=department,
        ),
        course=CourseRef(course_name=course),
        description=description,
        status=ApologyStatus(status),
        created_at=datetime(2026, 3, 1, 9, 30),
        reason=reason,
        attachment=attachment,
    )


class FakeApologyRepo:
    """In-memory backing service that behaves like the real one: decisions
    only succeed on pending apologies."""

    def __init__(self, records=()):
        self._records = {r.apology_id: r for r in records}
        self.fetch_error = None
        self.fail_with = None
        self.list_calls = 0
        self.submit_calls = []
        self.on_submit = None

    def list_apologies(self, *, scope):
        self.list_calls += 1
        if self.fetch_error:
            raise FetchError(self.fetch_error)
        return [r for r in self._records.values() if scope.matches(r)]

    def submit_decision(self, *, apology_id, status, reason, decided_by):
        self.submit_calls.append(
            {"apology_id": apology_id, "status": status, "reason": reason, "decided_by": decided_by}
        )
        if self.on_submit:
            self.on_submit()
        if self.fail_with:
            raise self.fail_with
        current = self._records.get(apology_id)
        if current is None:
            raise DecisionError("Apology not found")
        if current.status != ApologyStatus.PENDING:
            raise DecisionConflictError(f"Apology was already {current.status.value}")
        updated = dataclasses.replace(
            current,
            status=status,
            reason=reason,
            decided_by=decided_by,
            decided_at=datetime(2026, 3, 2, 10, 0),
        )
        self._records[apology_id] = updated
        return updated


@pytest.fixture
def make_apology():
    return build_apology


@pytest.fixture
def three_apologies():
    return [
        build_apology("1", name="Ali Hassan", department="CS", course="Data Structures"),
        build_apology(
            "2",
            name="Sara Ali",
            department="IS",
            course="Databases",
            status=ApologyStatus.ACCEPTED,
            reason="Documented",
            attachment="uploads\\sara\\note.png",
        ),
        build_apology(
            "3",
            name="Omar Khaled",
            department="AI",
            course="Machine Learning",
            status=ApologyStatus.REJECTED,
            reason="No proof",
        ),
    ]


@pytest.fixture
def fake_repo(three_apologies):
    return FakeApologyRepo(three_apologies)
