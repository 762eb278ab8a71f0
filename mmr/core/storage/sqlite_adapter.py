import sqlite3
import threading
from pathlib import Path
from typing import Iterable, Iterator, Optional

from mmr.core.node_log import Node
from mmr.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class NodeStore:
    """
    SQLite backend for a persisted Node Log.

    Provides:
    1. ``nodes``: every node in append order (position, height, value).
    2. ``meta``: small key/value facts about the log, e.g. the hasher name.

    Rows are only ever inserted; positions are the primary key so a replayed
    append cannot silently overwrite history.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn_local = threading.local()

        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.debug(f"Node store opened at {self.db_path}")

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS nodes (
                    position INTEGER PRIMARY KEY,
                    height INTEGER NOT NULL,
                    value BLOB NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Nodes
    # =========================================================================

    def append_nodes(self, nodes: Iterable[Node]) -> None:
        """Insert the nodes produced by one append, atomically."""
        rows = [(n.position, n.height, n.value) for n in nodes]
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany(
                    "INSERT INTO nodes (position, height, value) VALUES (?, ?, ?)", rows
                )
        except sqlite3.IntegrityError:
            logger.error(f"Rejected write of positions {rows[0][0]}..{rows[-1][0]}: already stored")
            raise

    def load_nodes(self) -> Iterator[Node]:
        """Yield every stored node in position order."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT position, height, value FROM nodes ORDER BY position")
        for row in cursor:
            yield Node(row["position"], row["height"], bytes(row["value"]))

    def node_count(self) -> int:
        conn = self._get_conn()
        row = conn.execute("SELECT COUNT(*) AS c FROM nodes").fetchone()
        return row["c"]

    # =========================================================================
    # Metadata
    # =========================================================================

    def set_meta(self, key: str, value: str):
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)",
                (key, value)
            )

    def get_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        row = conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def close(self):
        """Close the connection for the current thread."""
        if hasattr(self._conn_local, "conn"):
            self._conn_local.conn.close()
            del self._conn_local.conn

    def __repr__(self) -> str:
        return f"NodeStore({self.db_path})"
