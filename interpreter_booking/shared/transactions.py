"""Commit helpers for multi-row writes"""

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(db: Session):
    """
    Commit everything staged inside the block, or nothing.

    A version mismatch on any versioned row surfaces as ConcurrencyConflictError.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"⚠️ Concurrent modification detected: {str(e)}")
        raise ConcurrencyConflictError("Record was modified by another request") from e
    except Exception:
        db.rollback()
        raise


def check_version(row, expected_version: Optional[int]) -> None:
    """Fail fast when the caller's copy of a row is out of date"""
    if expected_version is not None and row.version != expected_version:
        raise ConcurrencyConflictError(
            f"Version mismatch for {row.id}: expected {expected_version}, found {row.version}"
        )
