"""
Execution Log.

Records the result of every completed step, keyed by run ID and step key,
so a retried or resumed run can return recorded results instead of
re-executing side effects.

Results are stored as JSON. A step result must therefore be
JSON-serializable; what a step returns on its first execution and what
it returns on replay are both the decoded JSON value.

Example:
    >>> with SQLiteExecutionLog(db_path="./steps.db") as log:
    ...     log.record("run-1", "http-request", {"status": 200})
    ...     log.get("run-1", "http-request").result
    {'status': 200}
"""

import contextlib
import json
import logging
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from inflow.errors import PermanentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    """A completed step."""
    run_id: str
    step_key: str
    result: Any
    attempts: int = 1
    recorded_at: float = 0.0


def encode_result(step_key: str, result: Any) -> str:
    try:
        return json.dumps(result)
    except (TypeError, ValueError) as e:
        raise PermanentError(
            f"Result of step '{step_key}' is not JSON-serializable",
            details={"step_key": step_key},
            original_error=e,
        ) from e


class ExecutionLog(ABC):
    """
    Abstract Base Class for step result logs.
    """

    @abstractmethod
    def get(self, run_id: str, step_key: str) -> Optional[StepRecord]:
        """Get the record of a completed step, or None."""
        pass

    @abstractmethod
    def record(self, run_id: str, step_key: str, result: Any, attempts: int = 1) -> StepRecord:
        """Record a completed step and return the stored record."""
        pass

    @abstractmethod
    def steps(self, run_id: str) -> List[StepRecord]:
        """All completed steps of a run, in completion order."""
        pass

    @abstractmethod
    def clear(self, run_id: str) -> None:
        """Forget every step of a run."""
        pass


class InMemoryExecutionLog(ExecutionLog):
    """
    Simple In-Memory Execution Log.
    Not persistent; results still go through JSON like the SQLite log.
    """

    def __init__(self):
        self._store: Dict[Tuple[str, str], Tuple[str, int, float]] = {}
        self._lock = threading.RLock()

    def get(self, run_id: str, step_key: str) -> Optional[StepRecord]:
        with self._lock:
            row = self._store.get((run_id, step_key))
        if row is None:
            return None
        payload, attempts, recorded_at = row
        return StepRecord(run_id, step_key, json.loads(payload), attempts, recorded_at)

    def record(self, run_id: str, step_key: str, result: Any, attempts: int = 1) -> StepRecord:
        payload = encode_result(step_key, result)
        recorded_at = time.time()
        with self._lock:
            self._store[(run_id, step_key)] = (payload, attempts, recorded_at)
        return StepRecord(run_id, step_key, json.loads(payload), attempts, recorded_at)

    def steps(self, run_id: str) -> List[StepRecord]:
        with self._lock:
            keys = [key for key in self._store if key[0] == run_id]
        return [self.get(*key) for key in keys]

    def clear(self, run_id: str) -> None:
        with self._lock:
            for key in [key for key in self._store if key[0] == run_id]:
                del self._store[key]


class SQLiteExecutionLog(ExecutionLog):
    """
    Persistent Execution Log using SQLite.

    Uses a single reusable connection guarded by a lock, with WAL mode for
    concurrent readers. Several runs may share one log.

    Attributes:
        db_path: Path to the SQLite database file
        table_name: Name of the table storing step records
        timeout: Connection timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        db_path: str = "steps.db",
        table_name: str = "step_log",
        timeout: float = 30.0
    ):
        self.db_path = db_path
        self.table_name = table_name
        self.timeout = timeout
        self._lock = threading.RLock()
        self._closed = False

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(
            self.db_path,
            timeout=self.timeout,
            check_same_thread=False
        )
        self._connection.execute("PRAGMA journal_mode=WAL")

        self._init_db()
        logger.debug(f"SQLiteExecutionLog initialized: {db_path}, table={table_name}")

    def _init_db(self) -> None:
        with self._lock:
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    run_id TEXT NOT NULL,
                    step_key TEXT NOT NULL,
                    result TEXT NOT NULL,
                    attempts INTEGER NOT NULL DEFAULT 1,
                    recorded_at REAL NOT NULL,
                    PRIMARY KEY (run_id, step_key)
                )
            """)
            self._connection.commit()

    def _check_closed(self) -> None:
        if self._closed:
            raise RuntimeError(
                "Cannot perform operation: SQLiteExecutionLog connection has been closed. "
                "Create a new SQLiteExecutionLog instance to continue."
            )

    def get(self, run_id: str, step_key: str) -> Optional[StepRecord]:
        self._check_closed()
        query = (
            f"SELECT result, attempts, recorded_at FROM {self.table_name} "
            "WHERE run_id = ? AND step_key = ?"
        )
        with self._lock:
            row = self._connection.execute(query, (run_id, step_key)).fetchone()
        if row is None:
            return None
        return StepRecord(run_id, step_key, json.loads(row[0]), row[1], row[2])

    def record(self, run_id: str, step_key: str, result: Any, attempts: int = 1) -> StepRecord:
        self._check_closed()
        payload = encode_result(step_key, result)
        recorded_at = time.time()
        query = (
            f"INSERT OR REPLACE INTO {self.table_name} "
            "(run_id, step_key, result, attempts, recorded_at) VALUES (?, ?, ?, ?, ?)"
        )
        with self._lock:
            self._connection.execute(query, (run_id, step_key, payload, attempts, recorded_at))
            self._connection.commit()
        return StepRecord(run_id, step_key, json.loads(payload), attempts, recorded_at)

    def steps(self, run_id: str) -> List[StepRecord]:
        self._check_closed()
        query = (
            f"SELECT step_key, result, attempts, recorded_at FROM {self.table_name} "
            "WHERE run_id = ? ORDER BY recorded_at, rowid"
        )
        with self._lock:
            rows = self._connection.execute(query, (run_id,)).fetchall()
        return [StepRecord(run_id, key, json.loads(result), attempts, at) for key, result, attempts, at in rows]

    def clear(self, run_id: str) -> None:
        self._check_closed()
        with self._lock:
            self._connection.execute(f"DELETE FROM {self.table_name} WHERE run_id = ?", (run_id,))
            self._connection.commit()

    def close(self) -> None:
        """
        Close the database connection.

        After calling close(), the log instance cannot be used.
        """
        if self._closed:
            return

        with self._lock:
            try:
                self._connection.close()
                logger.debug(f"SQLiteExecutionLog connection closed: {self.db_path}")
            except Exception as e:
                logger.warning(f"Error closing SQLiteExecutionLog connection: {e}")
            finally:
                self._closed = True

    def __enter__(self) -> "SQLiteExecutionLog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self):
        # Note: __del__ is not guaranteed to be called
        if not getattr(self, "_closed", True):
            with contextlib.suppress(Exception):
                self.close()
