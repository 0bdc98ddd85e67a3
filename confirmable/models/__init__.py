from confirmable.models.episode import Episode
from confirmable.models.script import Script
from confirmable.models.user import User

__all__ = ["Episode", "Script", "User"]
