"""Re-export all models so Base.metadata sees them."""

from studykit.db.models.artifact import Artifact
from studykit.db.models.query import Query
from studykit.db.models.user_settings import UserSettings

__all__ = [
    "Artifact",
    "Query",
    "UserSettings",
]
