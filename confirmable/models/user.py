"""User model referenced by confirmations.

Confirmable records store only the integer id of the user who confirmed
them. This model is what those ids resolve to.
"""

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """A person who can confirm records.

    Attributes:
        id: Integer primary key, the value stored in ``*_by`` fields.
        name: Display name.
        email: Contact address, if known.
    """
    id: int | None = Field(default=None, primary_key=True)
    name: str | None = None
    email: str | None = Field(default=None, index=True)
