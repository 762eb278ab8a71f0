"""
Persistent Storage Module.

Provides SQLite-backed persistence for the Node Log so an MMR survives
restarts.
"""

from mmr.core.storage.sqlite_adapter import NodeStore

__all__ = ["NodeStore"]
