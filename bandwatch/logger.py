import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import LOG_DB_PATH


class DatabaseHandler(logging.Handler):
    """
    A custom logging handler that writes log records to an SQLite database.
    """
    def __init__(self, db_path: str):
        super().__init__()
        self.db_path = Path(db_path)
        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS logs (
                    timestamp INTEGER NOT NULL,
                    level TEXT NOT NULL,
                    module TEXT NOT NULL,
                    message TEXT NOT NULL
                )
                """
            )

    def emit(self, record: logging.LogRecord):
        """
        Saves a log record to the database.
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO logs (timestamp, level, module, message) VALUES (?, ?, ?, ?)",
                    (
                        int(datetime.now().timestamp() * 1000),
                        record.levelname,
                        record.name,
                        record.getMessage(),
                    ),
                )
        except sqlite3.Error:
            self.handleError(record)


_logger: Optional[logging.Logger] = None


def get_logger(name: str, db_path: Optional[str] = LOG_DB_PATH) -> logging.Logger:
    """
    Configures and returns a logger that writes to the console and, when a
    database path is configured, to SQLite.
    """
    global _logger
    if _logger is None:
        _logger = logging.getLogger("Bandwatch")
        _logger.setLevel(logging.INFO)

        # Prevent logs from being propagated to the root logger
        _logger.propagate = False

        # Console handler
        if not any(isinstance(h, logging.StreamHandler) for h in _logger.handlers):
            console_handler = logging.StreamHandler()
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            console_handler.setFormatter(formatter)
            _logger.addHandler(console_handler)

        # Database handler
        if db_path and not any(isinstance(h, DatabaseHandler) for h in _logger.handlers):
            _logger.addHandler(DatabaseHandler(db_path))

    return _logger.getChild(name)
