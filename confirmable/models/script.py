"""Script model with an unsuffixed approval."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from confirmable.core.confirmable import ConfirmableMixin, acts_as_confirmable
from confirmable.models.user import User


@acts_as_confirmable("approved", suffix="", user_model=User)
class Script(SQLModel, ConfirmableMixin, table=True):
    """A script that must be approved before it is recorded.

    The approval uses an empty suffix, so its backing fields are
    ``approved_at`` and ``approved_by`` and no ``approved_at`` alias is
    added on top of them.

    Attributes:
        id: Unique identifier (UUID).
        title: Script title.
        approved_at: When the script was approved.
        approved_by: User id who approved it.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str
    approved_at: datetime | None = None
    approved_by: int | None = None
