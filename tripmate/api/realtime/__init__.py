"""Real-time chat presence."""

from .presence import PresenceRegistry

__all__ = ['PresenceRegistry']
