"""Database error helpers."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# Postgres unique_violation, MySQL ER_DUP_ENTRY.
_UNIQUE_SQLSTATES = frozenset({"23505"})
_UNIQUE_ERRNOS = frozenset({1062})


def is_unique_violation(error: IntegrityError, *, column: str | None = None) -> bool:
    """Return True when the IntegrityError is a unique-constraint conflict.

    When ``column`` is given, the driver message must also mention it so a
    conflict on an unrelated constraint is not misreported.
    """
    original = getattr(error, "orig", None)
    message = str(original or error).lower()
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    args = getattr(original, "args", ()) or ()
    errno = args[0] if args and isinstance(args[0], int) else None

    matched = (
        sqlstate in _UNIQUE_SQLSTATES
        or errno in _UNIQUE_ERRNOS
        or "duplicate key" in message
        or "duplicate entry" in message
        or "unique constraint" in message
    )
    if not matched:
        return False
    if column is None:
        return True
    return column.lower() in message


__all__ = ["is_unique_violation"]
