from __future__ import annotations

from functools import wraps

import structlog
from flask import Flask, jsonify, redirect, request, session

from ..core.enums import ApologyStatus, ReviewState
from ..core.exceptions import (
    AuthorizationError,
    DecisionError,
    DomainError,
    FetchError,
    IllegalTransitionError,
    ValidationError,
)
from ..container import Container
from ..users.model import Viewer
from .filters import INSTRUCTOR_ACCEPTED, STAFF_REVIEW, FilterCriteria, PageProfile

log = structlog.get_logger(__name__)

_ERROR_STATUS = (
    (AuthorizationError, 403),
    (ValidationError, 400),
    (IllegalTransitionError, 409),
    (FetchError, 502),
    (DecisionError, 502),
)


def _flag(value) -> bool:
    return str(value or "").lower() in {"1", "true", "yes"}


def _error_response(e: DomainError):
    for exc_type, code in _ERROR_STATUS:
        if isinstance(e, exc_type):
            return jsonify({"error": str(e)}), code
    return jsonify({"error": str(e)}), 400


def register(app: Flask, container: Container) -> None:
    service = container.apology_service

    def viewer_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                viewer = Viewer.from_session(session)
            except AuthorizationError as e:
                return jsonify({"error": str(e)}), 401
            return view(viewer, *args, **kwargs)

        return wrapper

    def _page(viewer: Viewer, profile: PageProfile):
        try:
            criteria = FilterCriteria.from_args(request.args, profile)
            board = service.page(viewer, profile, criteria, refresh=_flag(request.args.get("refresh")))
            return jsonify(board.snapshot())
        except DomainError as e:
            return _error_response(e)
        except Exception:
            log.exception("apology_page_failed", page=profile.name)
            return jsonify({"error": "Failed to load apologies"}), 500

    def _payload() -> dict:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            return data
        return request.form.to_dict()

    @app.route("/apologies", methods=["GET"], endpoint="staff_apologies")
    @viewer_required
    def staff_apologies(viewer: Viewer):
        return _page(viewer, STAFF_REVIEW)

    @app.route("/instructor/apologies", methods=["GET"], endpoint="instructor_apologies")
    @viewer_required
    def instructor_apologies(viewer: Viewer):
        return _page(viewer, INSTRUCTOR_ACCEPTED)

    @app.route("/apologies/<apology_id>", methods=["GET"], endpoint="view_apology")
    @viewer_required
    def view_apology(viewer: Viewer, apology_id: str):
        try:
            board = service.page(viewer, service.profile_for(viewer))
            record = board.open(apology_id)
            return jsonify({"apology": board.to_ui(record), "review": board.review.snapshot()})
        except DomainError as e:
            return _error_response(e)

    @app.route("/apologies/<apology_id>/draft", methods=["POST"], endpoint="update_apology_draft")
    @viewer_required
    def update_apology_draft(viewer: Viewer, apology_id: str):
        try:
            board = service.page(viewer, service.profile_for(viewer))
            selected = board.review.selected
            if selected is None or selected.apology_id != apology_id:
                board.open(apology_id)
            board.review.update_draft(str(_payload().get("reason") or ""))
            return jsonify({"review": board.review.snapshot()})
        except DomainError as e:
            return _error_response(e)

    def _decide(viewer: Viewer, apology_id: str, status: ApologyStatus):
        try:
            board = service.page(viewer, service.profile_for(viewer))
            review = board.review
            selected = review.selected
            if review.state != ReviewState.VIEWING or selected is None or selected.apology_id != apology_id:
                board.open(apology_id)

            reason = _payload().get("reason")
            if review.decide(status, None if reason is None else str(reason)):
                return jsonify(board.snapshot())

            code = 409 if review.conflict else 502
            return jsonify({**board.snapshot(), "error": review.error}), code
        except DomainError as e:
            return _error_response(e)
        except Exception:
            log.exception("apology_decision_crashed", apology_id=apology_id)
            return jsonify({"error": "Failed to update apology status."}), 500

    @app.route("/apologies/<apology_id>/accept", methods=["POST"], endpoint="accept_apology")
    @viewer_required
    def accept_apology(viewer: Viewer, apology_id: str):
        return _decide(viewer, apology_id, ApologyStatus.ACCEPTED)

    @app.route("/apologies/<apology_id>/reject", methods=["POST"], endpoint="reject_apology")
    @viewer_required
    def reject_apology(viewer: Viewer, apology_id: str):
        return _decide(viewer, apology_id, ApologyStatus.REJECTED)

    @app.route("/apologies/review/close", methods=["POST"], endpoint="close_apology_review")
    @viewer_required
    def close_apology_review(viewer: Viewer):
        try:
            board = service.board_for(viewer, service.profile_for(viewer))
            board.review.close()
            return jsonify({"review": board.review.snapshot()})
        except DomainError as e:
            return _error_response(e)

    @app.route("/apologies/<apology_id>/attachment", methods=["GET"], endpoint="apology_attachment")
    @viewer_required
    def apology_attachment(viewer: Viewer, apology_id: str):
        try:
            board = service.page(viewer, service.profile_for(viewer))
        except DomainError as e:
            return _error_response(e)

        record = board.store.get(apology_id)
        if record is None:
            return jsonify({"error": "Apology not found"}), 404
        return redirect(service.resolver.resolve_or_placeholder(record.attachment))
