import functools
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from ..exceptions import PayablesError, PersistenceError

logger = logging.getLogger(__name__)


def atomic_operation(name):
    """
    Run the decorated function as one unit of work.

    Every statement inside commits together or not at all: any exception
    leaving the block rolls the transaction back before it reaches the
    caller. Database failures are re-raised as PersistenceError so the
    boundary only has to know the payables error types.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                with transaction.atomic():
                    return func(*args, **kwargs)
            except (PayablesError, ValidationError) as exc:
                logger.warning("%s rejected, rolled back: %s", name, exc)
                raise
            except DatabaseError as exc:
                logger.exception("%s failed, rolled back", name)
                raise PersistenceError(f"Failed to {name.replace('_', ' ')}") from exc
        return wrapper
    return decorator


def require_atomic_block(what):
    # Row mutations are only legal inside the owning operation's transaction
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError(f"{what} must run inside an atomic block")
