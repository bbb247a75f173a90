from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ApologyStatus
from .model import Apology, ApologyScope


class ApologyRepository(Protocol):
    def list_apologies(self, *, scope: ApologyScope) -> Sequence[Apology]:
        """Bulk read of every apology inside ``scope``.

        Raises FetchError when the backing service cannot be read.
        """

        raise NotImplementedError

    def submit_decision(
        self,
        *,
        apology_id: str,
        status: ApologyStatus,
        reason: Optional[str],
        decided_by: int,
    ) -> Optional[Apology]:
        """Record a decision and return the updated apology (None if the
        service only acknowledged it).

        Raises DecisionConflictError if the apology is no longer pending and
        DecisionError for any other failure.
        """

        raise NotImplementedError
