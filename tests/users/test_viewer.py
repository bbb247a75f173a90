from __future__ import annotations

import pytest

from src.apology_review.apology_review.apologies.model import ApologyScope
from src.apology_review.apology_review.core.enums import Role
from src.apology_review.apology_review.core.exceptions import AuthorizationError
from src.apology_review.apology_review.users.model import Viewer


def test_from_session_builds_instructor_with_courses():
    viewer = Viewer.from_session({"user_id": "5", "role": "instructor", "name": "Dr. Mona", "courses": ["Databases", ""]})

    assert viewer == Viewer(user_id=5, full_name="Dr. Mona", role=Role.INSTRUCTOR, courses=("Databases",))
    assert not viewer.can_review


@pytest.mark.parametrize(
    "session",
    [
        {},
        {"user_id": "64f0c2aa9b1e", "role": "staff"},
        {"user_id": None, "role": "staff"},
        {"user_id": 1, "role": "student"},
    ],
)
def test_unusable_sessions_are_not_signed_in(session):
    with pytest.raises(AuthorizationError):
        Viewer.from_session(session)


def test_instructor_without_courses_gets_an_empty_scope():
    viewer = Viewer.from_session({"user_id": 5, "role": "instructor"})

    assert viewer.courses == ()
    assert ApologyScope.for_viewer(viewer).course_names == frozenset()
