"""Confirmation semantics for attributes of persistent records.

A confirmable attribute is a logical name (``recorded``) backed by two
fields on the host record:

    recorded_confirmed_at   when it was confirmed (None = not confirmed)
    recorded_confirmed_by   id of the confirming user (None = not confirmed)

The attribute counts as confirmed only while both fields are set. The
``_confirmed`` part is the suffix; it can be changed per attachment and
may be empty, giving ``recorded_at`` / ``recorded_by``.

Attaching names to a class:

    @acts_as_confirmable("recorded", "produced")
    class Episode(ConfirmableMixin, SQLModel, table=True):
        ...
        recorded_confirmed_at: datetime | None = None
        recorded_confirmed_by: int | None = None

The core API is name-keyed and explicit (``is_confirmed``,
``set_confirmed``, ``confirmer``, ``set_confirmer``). For form binding,
each name also gets a property that reads as a boolean and accepts
checkbox values (``episode.recorded = "1"``), a ``<name>_confirmer``
property, and, when the suffix is non-empty, a ``<name>_at`` alias.

Degraded inputs never raise: an unknown current user falls back to
``settings.fallback_confirmer_id`` and an unusable confirmer value clears
the reference.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import Session

from confirmable.core.current_user import is_user_id, resolve_confirmer_id

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "_confirmed"

_OPTION_KEYS = {"suffix", "user_model"}


class UnknownConfirmableError(LookupError):
    """Raised when a name was never attached to the record's class."""


def _default_user_model():
    # Imported lazily: host models import this module.
    from confirmable.models.user import User

    return User


def _is_unchecked(value) -> bool:
    """Whether a checkbox-style value means "not confirmed"."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "0")
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _parse_timestamp(text: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime, accepting a trailing Z."""
    try:
        return datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _confirmation_time(value) -> datetime:
    """Timezone-aware timestamp to store for a truthy checkbox value."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        parsed = _parse_timestamp(value)
        if parsed is not None:
            return _as_utc(parsed)
    return datetime.now(UTC)


def write_through(record, field_name: str, value, session: Session | None = None):
    """Set one field and persist it immediately.

    For a persistent mapped record this issues a single UPDATE of that
    column on its own connection and commits it there, so the value is
    stored even if the record's session is rolled back or closed, and
    none of the session's pending changes go out with it. Records that
    have no row yet (transient, pending, detached, or not mapped at all)
    only get the in-memory assignment; the value goes out with their next
    flush.
    """
    state = sa_inspect(record, raiseerr=False)
    if state is None or not state.persistent:
        setattr(record, field_name, value)
        return

    mapper = state.mapper
    if field_name not in mapper.column_attrs:
        logger.warning(
            f"{mapper.class_.__name__}.{field_name} is not a mapped column, "
            "assigning in memory only"
        )
        setattr(record, field_name, value)
        return

    session = session or state.session
    column = mapper.column_attrs[field_name].columns[0]
    criteria = [pk == ident for pk, ident in zip(mapper.primary_key, state.identity)]
    statement = update(column.table).where(*criteria).values({column.name: value})
    with session.get_bind(mapper).connect() as connection:
        connection.execute(statement)
        connection.commit()
    set_committed_value(record, field_name, value)
    logger.debug(f"Wrote {field_name}={value!r} through for {state.identity}")


@dataclass(frozen=True)
class ConfirmableField:
    """A confirmable attribute bound to its two backing fields.

    Attributes:
        name: Logical attribute name, e.g. "recorded".
        suffix: Inserted between the name and "_at"/"_by". May be empty.
        user_model: Class confirmer ids are looked up in. Defaults to
            ``confirmable.models.User``.
    """
    name: str
    suffix: str = DEFAULT_SUFFIX
    user_model: type | None = None

    @property
    def at_field(self) -> str:
        return f"{self.name}{self.suffix}_at"

    @property
    def by_field(self) -> str:
        return f"{self.name}{self.suffix}_by"

    def get_user_model(self) -> type:
        return self.user_model or _default_user_model()

    def is_confirmed(self, record) -> bool:
        """True while both the timestamp and the confirmer id are set."""
        return (
            getattr(record, self.at_field, None) is not None
            and getattr(record, self.by_field, None) is not None
        )

    def confirmed_at(self, record):
        return getattr(record, self.at_field, None)

    def set_confirmed(self, record, value, actor=None):
        """Apply a checkbox-style value.

        Unchecked values (False, None, "", "0", 0) clear both fields.
        Anything else confirms, unless the attribute is already
        confirmed, in which case the existing timestamp and confirmer are
        kept. The timestamp is ``value`` itself when it is a date, a
        datetime or an ISO-8601 string (naive values are read as UTC),
        and the current UTC time otherwise. The confirmer is ``actor`` if
        given, else the current user, else the configured fallback id.
        """
        if _is_unchecked(value):
            setattr(record, self.at_field, None)
            write_through(record, self.by_field, None)
            logger.debug(f"Cleared confirmation of {self.name}")
            return

        if self.is_confirmed(record):
            return

        confirmed_at = _confirmation_time(value)
        confirmer_id = resolve_confirmer_id(actor)
        setattr(record, self.at_field, confirmed_at)
        write_through(record, self.by_field, confirmer_id)
        logger.info(f"Confirmed {self.name} by user {confirmer_id} at {confirmed_at}")

    def confirmer(self, record, session: Session | None = None):
        """Load the user referenced by the confirmer id, or None.

        The lookup uses ``session``, else the record's own session, else
        a short-lived session on the application engine. In the last case
        None is returned if the user table has not been created there.
        """
        confirmer_id = getattr(record, self.by_field, None)
        if confirmer_id is None:
            return None

        user_model = self.get_user_model()
        if session is None:
            state = sa_inspect(record, raiseerr=False)
            session = state.session if state is not None else None
        if session is not None:
            return session.get(user_model, confirmer_id)

        from confirmable.core.database import engine

        if not sa_inspect(engine).has_table(user_model.__tablename__):
            logger.warning(f"No {user_model.__tablename__} table to look up confirmer {confirmer_id}")
            return None
        with Session(engine) as own_session:
            return own_session.get(user_model, confirmer_id)

    def set_confirmer(self, record, who, session: Session | None = None):
        """Store ``who`` as confirmer and persist the id right away.

        ``who`` may be a user instance or an integer id; anything else
        clears the confirmer. The timestamp is left alone.
        """
        if isinstance(who, self.get_user_model()):
            confirmer_id = who.id
        elif is_user_id(who):
            confirmer_id = who
        else:
            if who is not None:
                logger.debug(f"Ignoring confirmer value {who!r} for {self.name}")
            confirmer_id = None
        write_through(record, self.by_field, confirmer_id, session=session)


def _model_field_names(cls) -> set[str]:
    fields = getattr(cls, "model_fields", None)
    return set(fields) if isinstance(fields, Mapping) else set()


def _install_accessors(cls, field: ConfirmableField):
    """Add the per-name properties used for form binding."""
    setattr(
        cls,
        field.name,
        property(
            field.is_confirmed,
            field.set_confirmed,
            doc=f"Whether {field.name} is confirmed; assign checkbox values to change it.",
        ),
    )
    setattr(
        cls,
        f"{field.name}_confirmer",
        property(field.confirmer, field.set_confirmer, doc=f"User who confirmed {field.name}."),
    )
    if field.suffix:
        setattr(
            cls,
            f"{field.name}_at",
            property(field.confirmed_at, doc=f"Alias of {field.at_field}."),
        )


def attach_confirmable(cls, *names, suffix: str | None = None, user_model: type | None = None):
    """Make ``names`` confirmable attributes of ``cls``.

    Mapping arguments among ``names`` are read as options, so
    ``attach_confirmable(Episode, "recorded", {"suffix": "_ok"})`` equals
    ``attach_confirmable(Episode, "recorded", suffix="_ok")``.
    """
    options = {}
    attr_names = []
    for name in names:
        if isinstance(name, Mapping):
            options.update(name)
        else:
            attr_names.append(name)

    unknown = set(options) - _OPTION_KEYS
    if unknown:
        raise TypeError(f"Unknown acts_as_confirmable options: {sorted(unknown)}")
    if suffix is None:
        suffix = options.get("suffix", DEFAULT_SUFFIX)
    if user_model is None:
        user_model = options.get("user_model")
    if not isinstance(suffix, str):
        raise TypeError(f"suffix must be a string, got {suffix!r}")

    declared = _model_field_names(cls)
    registry = dict(getattr(cls, "__confirmable_fields__", {}))

    for name in attr_names:
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Invalid confirmable name: {name!r}")

        field = ConfirmableField(name=name, suffix=suffix, user_model=user_model)
        accessors = {name, f"{name}_confirmer"}
        if suffix:
            accessors.add(f"{name}_at")
        clashes = accessors & declared
        if clashes:
            raise ValueError(
                f"{cls.__name__}: confirmable {name!r} would shadow fields {sorted(clashes)}"
            )
        if declared:
            for backing in (field.at_field, field.by_field):
                if backing not in declared:
                    logger.warning(f"{cls.__name__} has no field {backing!r} for confirmable {name!r}")

        registry[name] = field
        _install_accessors(cls, field)
        logger.debug(f"{cls.__name__}: {name} is confirmable via {field.at_field}/{field.by_field}")

    cls.__confirmable_fields__ = registry


def acts_as_confirmable(*names, suffix: str | None = None, user_model: type | None = None):
    """Class decorator form of ``attach_confirmable``."""

    def decorator(cls):
        attach_confirmable(cls, *names, suffix=suffix, user_model=user_model)
        return cls

    return decorator


class ConfirmableMixin:
    """Name-keyed confirmation API for classes using ``acts_as_confirmable``."""

    __confirmable_fields__ = {}

    @classmethod
    def confirmable_field(cls, name: str) -> ConfirmableField:
        try:
            return cls.__confirmable_fields__[name]
        except KeyError:
            raise UnknownConfirmableError(f"{cls.__name__} has no confirmable {name!r}") from None

    @classmethod
    def confirmable_names(cls) -> list[str]:
        return list(cls.__confirmable_fields__)

    def is_confirmed(self, name: str) -> bool:
        return self.confirmable_field(name).is_confirmed(self)

    def confirmed_at(self, name: str):
        return self.confirmable_field(name).confirmed_at(self)

    def set_confirmed(self, name: str, value=True, actor=None):
        self.confirmable_field(name).set_confirmed(self, value, actor=actor)

    def confirmer(self, name: str, session: Session | None = None):
        return self.confirmable_field(name).confirmer(self, session=session)

    def set_confirmer(self, name: str, who, session: Session | None = None):
        self.confirmable_field(name).set_confirmer(self, who, session=session)
