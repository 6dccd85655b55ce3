"""Per-identity daily spin sessions."""
from .models import UserSession, WinRecord
from .store import SessionStore

__all__ = ["SessionStore", "UserSession", "WinRecord"]
