from __future__ import annotations

from typing import Optional

from ..core.enums import ApologyStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Trim free text; blank becomes None."""
    return (value or "").strip() or None


def require_decision_status(value: ApologyStatus | str) -> ApologyStatus:
    try:
        status = ApologyStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown apology status: {value!r}")
    if status is ApologyStatus.PENDING:
        raise ValidationError("A decision must be accepted or rejected")
    return status
