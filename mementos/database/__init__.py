"""
Database layer for Mementos: ORM models, entity managers and the
MementosDB data-access handle.
"""
from .manager import MementosDB, OwnerScope

__all__ = ["MementosDB", "OwnerScope"]
