import logging
import sqlite3
import json
from datetime import datetime
import os

from persistguard.config.settings import DB_PATH, LOG_FILE


class GuardianLogger:
    def __init__(self, db_path=DB_PATH, log_file=LOG_FILE):
        self.db_path = db_path
        self.log_file = log_file
        self._setup_logging()

    def _setup_logging(self):
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(self.log_file),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger("PersistGuard")

    def _setup_db(self):
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT,
                    event_type TEXT,
                    details TEXT
                )
            ''')
            conn.commit()
        finally:
            conn.close()

    def log_event(self, event_type, details=None):
        payload = json.dumps(details or {}, default=str)
        self.logger.info(f"Event: {event_type} | {payload}")

        try:
            self._setup_db()
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute('''
                    INSERT INTO events (timestamp, event_type, details)
                    VALUES (?, ?, ?)
                ''', (datetime.now().isoformat(), event_type, payload))
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"Failed to log to DB: {e}")

    def recent_events(self, limit=50):
        """Most recent events first, as dicts."""
        self._setup_db()
        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute('''
                SELECT timestamp, event_type, details FROM events
                ORDER BY id DESC LIMIT ?
            ''', (limit,)).fetchall()
        finally:
            conn.close()
        return [
            {"timestamp": r[0], "event_type": r[1], "details": json.loads(r[2])}
            for r in rows
        ]


# Global instance
guardian_logger = GuardianLogger()
