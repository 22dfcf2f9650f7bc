from sqlalchemy.exc import IntegrityError

_UNIQUE_MARKERS = (
    "unique constraint failed",  # sqlite
    "duplicate key value",  # postgres
    "duplicate entry",  # mysql
)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the insert failed on a uniqueness constraint (duplicate url)."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505" or getattr(orig, "sqlstate", None) == "23505":
        return True
    msg = str(orig if orig is not None else exc).lower()
    return any(m in msg for m in _UNIQUE_MARKERS)
