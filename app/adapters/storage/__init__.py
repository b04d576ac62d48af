"""Persistence adapters for beats, personnel assignments and the audit log.

Services depend on ``AbstractBeatRepository``; the in-memory implementation
backs local runs and tests.
"""

from app.adapters.storage.base import AbstractBeatRepository, Row
from app.adapters.storage.in_memory import InMemoryBeatRepository

__all__ = ["AbstractBeatRepository", "InMemoryBeatRepository", "Row"]
