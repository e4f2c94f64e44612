import logging
from typing import Optional

from .database import default_db_path, get_db_connection, init_db


class SQLiteHandler(logging.Handler):
    """Writes quiz log records to the ``logs`` table next to the overrides.

    The table is created when the handler is built, so it can be attached
    before anything else has touched the database.
    """

    def __init__(self, db_path: Optional[str] = None, level=logging.NOTSET):
        super().__init__(level)
        self.db_path = db_path or default_db_path()
        init_db(self.db_path)

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
            conn = get_db_connection(self.db_path)
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO logs (level, logger, message) VALUES (?, ?, ?)",
                        (record.levelname, record.name, message),
                    )
            finally:
                conn.close()
        except Exception:
            self.handleError(record)
