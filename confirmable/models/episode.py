"""Episode model with confirmable production stages.

An episode goes through recording, production and editing. Each stage is
a confirmable attribute: someone ticks it off and the tick records who
did it and when.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from confirmable.core.confirmable import ConfirmableMixin, acts_as_confirmable
from confirmable.models.user import User


@acts_as_confirmable("recorded", "produced", "edited", user_model=User)
class Episode(SQLModel, ConfirmableMixin, table=True):
    """An episode whose production stages are individually confirmed.

    Besides the columns below, ``acts_as_confirmable`` gives every stage a
    boolean property (``episode.recorded``) that also accepts checkbox
    values, a ``<stage>_confirmer`` property and a ``<stage>_at`` alias.

    Attributes:
        id: Unique identifier (UUID).
        title: Episode title.
        created_at: When the episode was created.
        recorded_confirmed_at: When recording was confirmed.
        recorded_confirmed_by: User id who confirmed recording.
        produced_confirmed_at: When production was confirmed.
        produced_confirmed_by: User id who confirmed production.
        edited_confirmed_at: When editing was confirmed.
        edited_confirmed_by: User id who confirmed editing.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    recorded_confirmed_at: datetime | None = None
    recorded_confirmed_by: int | None = None
    produced_confirmed_at: datetime | None = None
    produced_confirmed_by: int | None = None
    edited_confirmed_at: datetime | None = None
    edited_confirmed_by: int | None = None
