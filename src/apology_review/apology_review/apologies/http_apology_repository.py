from __future__ import annotations

from typing import Any, Optional, Sequence

import httpx
import structlog

from ..core.constants import DEFAULT_HTTP_TIMEOUT
from ..core.enums import ApologyStatus
from ..core.exceptions import DecisionConflictError, DecisionError, FetchError, ValidationError
from .model import Apology, ApologyScope
from .repository import ApologyRepository

log = structlog.get_logger(__name__)


def _unwrap(body: Any, *keys: str) -> Any:
    if isinstance(body, dict):
        for k in keys:
            if k in body:
                return body[k]
    return body


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or response.reason_phrase)
    return response.reason_phrase


class HttpApologyRepository(ApologyRepository):
    """Talks to the apologies REST API.

    Staff read ``GET /apologies``; a restricted scope (instructor) reads
    ``GET /apologies/instructor``. Decisions go to ``PATCH /apologies/<id>``.
    A fresh client is used per call.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = float(timeout)
        self._transport = transport

    def _client(self) -> httpx.Client:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return httpx.Client(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )

    def list_apologies(self, *, scope: ApologyScope) -> Sequence[Apology]:
        restricted = scope.statuses is not None or scope.course_names is not None
        path = "/apologies/instructor" if restricted else "/apologies"

        try:
            with self._client() as client:
                response = client.get(path)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Failed to fetch apologies: {_error_message(e.response)}") from e
        except (httpx.RequestError, ValueError) as e:
            raise FetchError(f"Failed to fetch apologies: {e}") from e

        items = _unwrap(body, "data", "apologies")
        if not isinstance(items, list):
            raise FetchError("Failed to fetch apologies: unexpected response shape")

        out: list[Apology] = []
        for item in items:
            try:
                out.append(Apology.from_payload(item))
            except (ValidationError, AttributeError, TypeError, ValueError) as e:
                log.warning("apology_payload_skipped", error=str(e))
        return out

    def submit_decision(
        self,
        *,
        apology_id: str,
        status: ApologyStatus,
        reason: Optional[str],
        decided_by: int,
    ) -> Optional[Apology]:
        payload = {"status": status.value, "reason": reason or ""}

        try:
            with self._client() as client:
                response = client.patch(f"/apologies/{apology_id}", json=payload)
        except httpx.RequestError as e:
            raise DecisionError(f"Failed to update apology status: {e}") from e

        if response.status_code == 409:
            raise DecisionConflictError(_error_message(response))
        if response.status_code == 404:
            raise DecisionError("Apology not found")
        if response.is_error:
            raise DecisionError(f"Failed to update apology status: {_error_message(response)}")

        # Some deployments only acknowledge; the caller then patches from its own intent.
        try:
            body = _unwrap(response.json(), "data", "apology")
            return Apology.from_payload(body) if isinstance(body, dict) else None
        except (ValueError, ValidationError):
            return None
