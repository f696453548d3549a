"""Exports all models for easy access."""

from .base import Base, BaseModel
from .profile import Profile, UserRole
from .ticket import Ticket, TicketPriority, TicketStatus

__all__ = [
    "Base",
    "BaseModel",
    "Profile",
    "UserRole",
    "Ticket",
    "TicketPriority",
    "TicketStatus",
]
