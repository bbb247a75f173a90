from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.constants import DEFAULT_FETCH_LIMIT
from ..core.enums import ApologyStatus
from ..core.exceptions import DecisionConflictError, DecisionError, FetchError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_datetime
from .model import Apology, ApologyScope, CourseRef, StudentRef
from .repository import ApologyRepository

_COLUMNS = """
    apology_id, student_name, student_email, student_level, student_department,
    course_name, description, status, reason, attachment,
    created_at, seen_at, seen_by_staff, decided_by, decided_at
"""


def _row_to_apology(r: dict) -> Apology:
    return Apology(
        apology_id=str(r["apology_id"]),
        student=StudentRef(
            name=r["student_name"],
            email=r["student_email"],
            level=r.get("student_level"),
            department=r.get("student_department"),
        ),
        course=CourseRef(course_name=r["course_name"]),
        description=r["description"],
        status=ApologyStatus(r["status"]),
        created_at=normalize_mysql_datetime(r.get("created_at")),
        reason=r.get("reason"),
        attachment=r.get("attachment"),
        seen_at=normalize_mysql_datetime(r.get("seen_at")),
        seen_by_staff=bool(r.get("seen_by_staff")),
        decided_by=r.get("decided_by"),
        decided_at=normalize_mysql_datetime(r.get("decided_at")),
    )


class MySQLApologyRepository(ApologyRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, limit: int = DEFAULT_FETCH_LIMIT):
        self._conn_factory = conn_factory
        self._limit = int(limit)

    def list_apologies(self, *, scope: ApologyScope) -> Sequence[Apology]:
        clauses = ["1=1"]
        params: list[object] = []

        if scope.statuses is not None:
            if not scope.statuses:
                return []
            clauses.append(f"status IN ({', '.join(['%s'] * len(scope.statuses))})")
            params.extend(sorted(s.value for s in scope.statuses))
        if scope.course_names is not None:
            if not scope.course_names:
                return []
            clauses.append(f"LOWER(course_name) IN ({', '.join(['%s'] * len(scope.course_names))})")
            params.extend(sorted(scope.course_names))

        where = " AND ".join(clauses)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM apologies
                    WHERE {where}
                    ORDER BY created_at DESC, apology_id DESC
                    LIMIT %s
                    """,
                    tuple(params + [self._limit]),
                )
                return [_row_to_apology(r) for r in fetchall(cur)]
        except mysql.connector.Error as e:
            raise FetchError(f"Failed to fetch apologies: {e}") from e

    def get(self, *, apology_id: str) -> Optional[Apology]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM apologies WHERE apology_id=%s", (int(apology_id),))
            r = fetchone(cur)
            return _row_to_apology(r) if r else None

    def submit_decision(
        self,
        *,
        apology_id: str,
        status: ApologyStatus,
        reason: Optional[str],
        decided_by: int,
    ) -> Apology:
        try:
            key = int(apology_id)
        except (TypeError, ValueError):
            raise DecisionError("Apology not found")

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE apologies
                    SET status=%s, reason=%s, decided_by=%s, decided_at=NOW()
                    WHERE apology_id=%s AND status=%s
                    """,
                    (status.value, reason, int(decided_by), key, ApologyStatus.PENDING.value),
                )
                changed = cur.rowcount > 0
            current = self.get(apology_id=str(key))
        except mysql.connector.Error as e:
            raise DecisionError(f"Failed to update apology status: {e}") from e

        if current is None:
            raise DecisionError("Apology not found")
        if not changed:
            raise DecisionConflictError(f"Apology was already {current.status.value}")
        return current
