from __future__ import annotations

import threading

import pytest

from src.apology_review.apology_review.apologies import store as store_module
from src.apology_review.apology_review.apologies.store import ApologyStore
from src.apology_review.apology_review.core.enums import ApologyStatus, Role
from src.apology_review.apology_review.core.exceptions import ValidationError
from src.apology_review.apology_review.users.model import Viewer

STAFF = Viewer(user_id=1, full_name="Staff", role=Role.STAFF)
INSTRUCTOR = Viewer(user_id=7, full_name="Dr. Mona", role=Role.INSTRUCTOR, courses=("Databases",))


def test_load_replaces_instead_of_merging(three_apologies, make_apology):
    store = ApologyStore(STAFF)
    store.load(three_apologies)
    store.load([make_apology("9")])

    assert [r.apology_id for r in store.records] == ["9"]
    assert store.loaded


def test_instructor_store_keeps_only_accepted_for_own_courses(three_apologies, make_apology):
    store = ApologyStore(INSTRUCTOR)
    store.load(three_apologies + [make_apology("4", course="databases", status=ApologyStatus.PENDING)])

    assert [r.apology_id for r in store.records] == ["2"]


def test_patch_changes_one_record_and_keeps_order(three_apologies):
    store = ApologyStore(STAFF)
    store.load(three_apologies)

    assert store.patch("1", {"status": ApologyStatus.ACCEPTED, "reason": "ok"}) is True

    ids = [r.apology_id for r in store.records]
    assert ids == ["1", "2", "3"]
    assert store.get("1").status == ApologyStatus.ACCEPTED
    assert store.get("1").reason == "ok"
    assert store.get("1").description == three_apologies[0].description
    assert store.records[1:] == tuple(three_apologies[1:])


def test_patch_unknown_id_is_a_noop(three_apologies):
    store = ApologyStore(STAFF)
    store.load(three_apologies)
    before = store.records

    assert store.patch("404", {"status": ApologyStatus.REJECTED}) is False
    assert store.records == before


def test_patch_refuses_immutable_fields(three_apologies):
    store = ApologyStore(STAFF)
    store.load(three_apologies)

    with pytest.raises(ValidationError):
        store.patch("1", {"description": "edited"})


def test_failed_fetch_drops_stale_records(three_apologies):
    store = ApologyStore(STAFF)
    store.load(three_apologies)
    store.fail("backend down")

    assert store.records == ()
    assert store.error == "backend down"
    assert not store.loaded

    store.load(three_apologies)
    assert store.error is None


def test_dropdown_options_are_unique_in_first_seen_order(make_apology):
    store = ApologyStore(STAFF)
    store.load(
        [
            make_apology("1", department="cs", course="Databases"),
            make_apology("2", department="AI", course="Algorithms"),
            make_apology("3", department="CS", course="Databases"),
        ]
    )

    assert store.departments() == ["CS", "AI"]
    assert store.course_names() == ["Databases", "Algorithms"]


def test_reload_during_patch_never_overwrites_another_record(monkeypatch, make_apology):
    store = ApologyStore(STAFF)
    store.load([make_apology("1")])
    original_replace = store_module.dataclasses.replace
    reloader = {}

    def replace_while_reloading(record, **changes):
        # A request thread reloads the board while the decision is written back.
        reloader["thread"] = threading.Thread(target=store.load, args=([make_apology("9"), make_apology("1")],))
        reloader["thread"].start()
        reloader["thread"].join(timeout=0.2)
        return original_replace(record, **changes)

    monkeypatch.setattr(store_module.dataclasses, "replace", replace_while_reloading)

    assert store.patch("1", {"status": ApologyStatus.ACCEPTED}) is True
    reloader["thread"].join()

    assert [(r.apology_id, r.status) for r in store.records] == [
        ("9", ApologyStatus.PENDING),
        ("1", ApologyStatus.PENDING),
    ]
