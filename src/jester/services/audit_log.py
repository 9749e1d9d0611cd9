"""
Audit Log - persistent record of every handled message.

One row per dispatch: who wrote what, what the bot answered, how the
message was classified and how long it took. Used for chat history,
the health endpoint statistics and periodic cleanup.
"""
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Protocol

from jester.core.logging import logger
from jester.models.schemas import AuditRecord


class AuditLog(Protocol):
    """Message log sink used by the orchestrator."""

    def record(self, record: AuditRecord) -> int: ...

    def chat_history(self, chat_id: int, limit: int = 10) -> List[Dict[str, Any]]: ...

    def statistics(self) -> Dict[str, Any]: ...

    def cleanup(self, days_to_keep: int = 30) -> int: ...


class SQLiteAuditLog:
    """Message log stored in a local SQLite database."""

    def __init__(self, db_path: Path):
        """Initialize the message log."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS message_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id INTEGER NOT NULL,
                    user_id INTEGER,
                    user_name TEXT,
                    message_text TEXT,
                    bot_response TEXT,
                    tag TEXT NOT NULL,
                    is_group INTEGER NOT NULL DEFAULT 0,
                    processing_time_ms INTEGER,
                    error_message TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_message_logs_chat
                ON message_logs(chat_id, created_at)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_message_logs_created
                ON message_logs(created_at)
            """)

            conn.commit()

    def record(self, record: AuditRecord) -> int:
        """Append one record. Returns the row id."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO message_logs
                (chat_id, user_id, user_name, message_text, bot_response, tag,
                 is_group, processing_time_ms, error_message, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                record.chat_id, record.user_id, record.user_name, record.input_text,
                record.output_text, record.tag, int(record.is_group), record.latency_ms,
                record.error, record.created_at.isoformat(),
            ))
            conn.commit()

            logger.debug(f"Message logged: chat={record.chat_id} tag={record.tag}")
            return cursor.lastrowid

    def chat_history(self, chat_id: int, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent records of a chat, newest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("""
                SELECT * FROM message_logs
                WHERE chat_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            """, (chat_id, limit)).fetchall()
            return [dict(row) for row in rows]

    def statistics(self) -> Dict[str, Any]:
        """Totals for the health endpoint."""
        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0).isoformat()
        week_ago = (datetime.now() - timedelta(days=7)).isoformat()

        with sqlite3.connect(self.db_path) as conn:
            total = conn.execute("SELECT COUNT(*) FROM message_logs").fetchone()[0]
            messages_today = conn.execute(
                "SELECT COUNT(*) FROM message_logs WHERE created_at >= ?", (today,)
            ).fetchone()[0]
            errors_last_week = conn.execute(
                "SELECT COUNT(*) FROM message_logs WHERE error_message IS NOT NULL AND created_at >= ?",
                (week_ago,),
            ).fetchone()[0]
            errors = conn.execute(
                "SELECT COUNT(*) FROM message_logs WHERE error_message IS NOT NULL"
            ).fetchone()[0]
            chats = conn.execute("SELECT COUNT(DISTINCT chat_id) FROM message_logs").fetchone()[0]
            avg_latency = conn.execute(
                "SELECT AVG(processing_time_ms) FROM message_logs WHERE processing_time_ms IS NOT NULL"
            ).fetchone()[0]
            by_tag = dict(conn.execute(
                "SELECT tag, COUNT(*) FROM message_logs GROUP BY tag"
            ).fetchall())

        return {
            "total_messages": total,
            "messages_today": messages_today,
            "error_messages": errors,
            "errors_last_week": errors_last_week,
            "unique_chats": chats,
            "avg_processing_time_ms": round(avg_latency, 1) if avg_latency is not None else None,
            "by_tag": by_tag,
        }

    def cleanup(self, days_to_keep: int = 30) -> int:
        """Delete records older than ``days_to_keep`` days. Returns the number removed."""
        cutoff = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM message_logs WHERE created_at < ?", (cutoff,))
            conn.commit()
            deleted = cursor.rowcount

        logger.info(f"Message log cleanup: removed {deleted} records older than {days_to_keep} days")
        return deleted
