"""Database models and configuration for the advisory API."""

from .base import Base, get_engine, get_session
from .models import Allocation, AssetRecord, Client, Insurance, Movement, Simulation

__all__ = [
    "Base",
    "get_engine",
    "get_session",
    "Client",
    "Simulation",
    "Allocation",
    "AssetRecord",
    "Movement",
    "Insurance",
]
