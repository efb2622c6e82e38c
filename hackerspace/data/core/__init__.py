"""
Core models package: accounts, circles and audit events
"""

from .user_info.account import Account
from .circle import Circle, CircleMember
from .event_info.event import Event

__all__ = [
    'Account',
    'Circle',
    'CircleMember',
    'Event',
]
