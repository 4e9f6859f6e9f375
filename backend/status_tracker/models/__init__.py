"""ORM models. Importing this package registers every table with Base.metadata."""

from status_tracker.models.status_entry import StatusEntry
from status_tracker.models.user import User

__all__ = ["StatusEntry", "User"]
