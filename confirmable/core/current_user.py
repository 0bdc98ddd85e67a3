"""Resolution of the user on whose behalf a confirmation is recorded.

The current user is kept in a context variable so that it follows the
request (or task) that set it, including across threads spawned through
``contextvars.copy_context``. Nothing here raises: when no user is known,
``resolve_confirmer_id`` returns the configured fallback id.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar

from confirmable.core.config import settings

logger = logging.getLogger(__name__)

_current_user_id: ContextVar[int | None] = ContextVar("current_user_id", default=None)

# Range of a signed 64-bit INTEGER column.
MIN_USER_ID = -(2**63)
MAX_USER_ID = 2**63 - 1


def is_user_id(value) -> bool:
    """Whether ``value`` is an int (not a bool) that fits an INTEGER column."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_USER_ID <= value <= MAX_USER_ID
    )


def parse_user_id(text: str | None) -> int | None:
    """Parse a user id from a header or form value, or None if it is not one."""
    text = (text or "").strip()
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if is_user_id(value) else None


def user_id_of(actor) -> int | None:
    """Return the id carried by ``actor``.

    Accepts a bare integer id or any object with an integer ``id``
    attribute (a ``User`` row, typically). Booleans and integers too
    large for an INTEGER column are not ids.
    """
    if is_user_id(actor):
        return actor
    actor_id = getattr(actor, "id", None)
    return actor_id if is_user_id(actor_id) else None


def get_current_user_id() -> int | None:
    """Id of the user bound to the current context, if any."""
    return _current_user_id.get()


@contextmanager
def acting_as(actor):
    """Bind ``actor`` (a user or a user id) as the current user.

    Usage:
        with acting_as(user):
            episode.recorded = True
    """
    token = _current_user_id.set(user_id_of(actor))
    try:
        yield
    finally:
        _current_user_id.reset(token)


def resolve_confirmer_id(actor=None, fallback: int | None = None) -> int:
    """Pick the id to store as confirmer.

    Order: the explicit ``actor``, then the context's current user, then
    ``fallback`` (defaults to ``settings.fallback_confirmer_id``).
    """
    actor_id = user_id_of(actor) if actor is not None else None
    if actor_id is None:
        actor_id = get_current_user_id()
    if actor_id is None:
        actor_id = settings.fallback_confirmer_id if fallback is None else fallback
        logger.debug(f"No current user resolved, using fallback confirmer {actor_id}")
    return actor_id
