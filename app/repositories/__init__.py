"""Repository modules for progress persistence.

Both stores are re-exported here for convenient imports.
"""
from app.repositories.local_progress import LocalProgressStore
from app.repositories.remote_progress import RemoteProgressStore

__all__ = [
    "LocalProgressStore",
    "RemoteProgressStore",
]
