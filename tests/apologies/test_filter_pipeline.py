from __future__ import annotations

import itertools

import pytest

from src.apology_review.apology_review.apologies.filters import (
    INSTRUCTOR_ACCEPTED,
    STAFF_REVIEW,
    FilterCriteria,
    apply_filters,
    status_counts,
)
from src.apology_review.apology_review.core.enums import ApologyStatus
from src.apology_review.apology_review.core.exceptions import ValidationError


def _ids(records):
    return [r.apology_id for r in records]


def test_status_filter_keeps_single_record_in_place(three_apologies):
    out = apply_filters(three_apologies, STAFF_REVIEW, FilterCriteria(status="accepted"))
    assert _ids(out) == ["2"]


def test_search_matches_name_case_insensitively(three_apologies):
    out = apply_filters(three_apologies, STAFF_REVIEW, FilterCriteria(search="ali"))
    assert _ids(out) == ["1", "2"]


def test_search_ignores_surrounding_whitespace_and_case(three_apologies):
    out = apply_filters(three_apologies, STAFF_REVIEW, FilterCriteria(search="  ALI "))
    assert _ids(out) == ["1", "2"]


def test_search_matches_email(make_apology):
    records = [make_apology("1", name="Mona", email="m.farouk@uni.test"), make_apology("2", name="Hany")]
    out = apply_filters(records, STAFF_REVIEW, FilterCriteria(search="FAROUK"))
    assert _ids(out) == ["1"]


def test_staff_search_does_not_look_at_course(make_apology):
    records = [make_apology("1", name="Mona", course="Databases")]
    assert apply_filters(records, STAFF_REVIEW, FilterCriteria(search="data")) == []


def test_department_scope_is_exact_and_case_insensitive(make_apology):
    records = [make_apology("1", department="CS"), make_apology("2", department="CSE"), make_apology("3", department=None)]

    assert _ids(apply_filters(records, STAFF_REVIEW, FilterCriteria(scope="cs"))) == ["1"]
    assert apply_filters(records, STAFF_REVIEW, FilterCriteria(scope="C")) == []


def test_instructor_page_only_shows_accepted(three_apologies):
    out = apply_filters(three_apologies, INSTRUCTOR_ACCEPTED, FilterCriteria())
    assert _ids(out) == ["2"]

    # A user status filter cannot widen the hard accepted filter.
    assert apply_filters(three_apologies, INSTRUCTOR_ACCEPTED, FilterCriteria(status="pending")) == []


def test_course_scope_is_substring_and_search_covers_course(make_apology):
    records = [
        make_apology("1", name="Ali", course="Intro to Databases", status=ApologyStatus.ACCEPTED),
        make_apology("2", name="Sara", course="Algorithms", status=ApologyStatus.ACCEPTED),
    ]

    assert _ids(apply_filters(records, INSTRUCTOR_ACCEPTED, FilterCriteria(scope="DATABASES"))) == ["1"]
    assert _ids(apply_filters(records, INSTRUCTOR_ACCEPTED, FilterCriteria(search="algo"))) == ["2"]


def test_predicates_are_conjunctive(three_apologies):
    out = apply_filters(three_apologies, STAFF_REVIEW, FilterCriteria(status="pending", search="sara"))
    assert out == []


def test_output_is_an_ordered_subsequence_for_any_criteria(three_apologies):
    statuses = ["all", "pending", "accepted", "rejected"]
    scopes = ["all", "CS", "is", "AI", "BIO"]
    searches = ["", "ali", "o", "zzz"]

    for status, scope, search in itertools.product(statuses, scopes, searches):
        criteria = FilterCriteria(status=status, scope=scope, search=search)
        out = apply_filters(three_apologies, STAFF_REVIEW, criteria)
        positions = [three_apologies.index(r) for r in out]
        assert positions == sorted(positions)
        assert apply_filters(three_apologies, STAFF_REVIEW, criteria) == out


def test_filtering_does_not_touch_the_input(three_apologies):
    snapshot = list(three_apologies)
    apply_filters(three_apologies, STAFF_REVIEW, FilterCriteria(status="rejected", search="omar"))
    assert three_apologies == snapshot


def test_unknown_status_filter_is_rejected():
    with pytest.raises(ValidationError):
        FilterCriteria(status="maybe")


def test_criteria_from_query_args():
    c = FilterCriteria.from_args({"status": " Pending ", "department": "ALL", "q": "ali"}, STAFF_REVIEW)
    assert c == FilterCriteria(status="pending", scope="all", search="ali")

    c = FilterCriteria.from_args({"course": "Databases"}, INSTRUCTOR_ACCEPTED)
    assert c.scope == "Databases"
    assert c.status == "all"


def test_status_counts(three_apologies):
    assert status_counts(three_apologies) == {"pending": 1, "accepted": 1, "rejected": 1, "all": 3}
