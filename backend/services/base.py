# backend/services/base.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import ConflictError, WarehouseAppError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, conflict_field=None, conflict_value=None, conflict_message=None):
    """Run the writes in the block and commit them once, rolling back on any failure.

    Repositories flush on add/delete, so a unique-constraint violation from a
    concurrent insert can surface inside the block as well as on commit;
    either way it is reported as a ConflictError on ``conflict_field``.
    Without a ``conflict_field`` the IntegrityError propagates unchanged.
    """
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if conflict_field is None:
            raise
        logger.warning("Integrity error on %s=%r: %s", conflict_field, conflict_value, exc.orig)
        raise ConflictError(conflict_field, conflict_value, message=conflict_message) from exc
    except WarehouseAppError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Write failed, rolled back")
        raise
