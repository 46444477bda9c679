"""
Helpers for recognising store constraint violations after the fact.

The store (MySQL in production, SQLite in tests, Postgres where deployed)
enforces uniqueness; services catch IntegrityError and ask whether the
failure was a duplicate key so they can surface a specific message.
"""

from sqlalchemy.exc import IntegrityError

POSTGRES_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the IntegrityError was raised by a unique/primary key constraint."""
    orig = getattr(error, "orig", None)
    if orig is None:
        return False

    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode == POSTGRES_UNIQUE_VIOLATION:
        return True

    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True

    return "unique constraint failed" in str(orig).lower()
