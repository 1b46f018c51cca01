# Overview: Store locking and retry helpers shared by every service.

from __future__ import annotations

import threading
import time
from functools import wraps

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


# One process-wide lock guards the store. Re-entrant so services can call
# each other; the depth counter tells the outermost call apart.
_store_lock = threading.RLock()
_depth = threading.local()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (locks) and StaleDataError
    (optimistic locking conflicts).
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def serialized(func):
    """
    Run a store operation under the store lock as one unit of work.

    RULES:
    - The outermost call commits on success (reads included, which ends the
      underlying transaction before the lock is released).
    - The outermost call rolls back on any exception, so a failed mutation
      leaves no partial state behind.
    - Nested calls join the outer unit of work and never commit on their own.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        with _store_lock:
            depth = getattr(_depth, "value", 0)
            _depth.value = depth + 1
            try:
                if depth:
                    return func(*args, **kwargs)

                def _op():
                    result = func(*args, **kwargs)
                    db.session.commit()
                    return result

                try:
                    return run_with_retry(_op)
                except Exception:
                    db.session.rollback()
                    raise
            finally:
                _depth.value = depth
    return wrapper
