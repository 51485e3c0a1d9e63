"""
Logging for PhotoTools POS
Every record goes to photo_tools.log and the console; errors are also kept
in errors.log. Files rotate by size and are flushed after each write so a
tail -f shows orders as they are finalized.
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MAIN_LOG_NAME = 'photo_tools.log'
ERROR_LOG_NAME = 'errors.log'


def _rotating_handler(path, level, max_bytes, backup_count, formatter):
    handler = RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


class ShopLogger:
    """Shop-wide logger; messages carry a ``[Component]`` tag"""

    def __init__(self, name="PhotoTools", log_dir="logs", log_level="INFO",
                 max_mb=10, backup_count=5):
        """
        Args:
            name: Name of the underlying ``logging`` logger
            log_dir: Folder for photo_tools.log and errors.log (created if missing)
            log_level: Minimum level, by name
            max_mb: Rotation size of photo_tools.log
            backup_count: Rotated copies of photo_tools.log to keep
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
        # Re-creating a logger with the same name must not duplicate output
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        self.logger.addHandler(_rotating_handler(
            self.log_dir / MAIN_LOG_NAME, logging.DEBUG,
            max_mb * 1024 * 1024, backup_count, formatter,
        ))
        self.logger.addHandler(_rotating_handler(
            self.log_dir / ERROR_LOG_NAME, logging.ERROR,
            5 * 1024 * 1024, 3, formatter,
        ))

        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(formatter)
        self.logger.addHandler(console)

    def debug(self, message, component=""):
        self._write(logging.DEBUG, message, component)

    def info(self, message, component=""):
        self._write(logging.INFO, message, component)

    def warning(self, message, component=""):
        self._write(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        self._write(logging.ERROR, message, component, exc_info)

    def critical(self, message, component="", exc_info=False):
        self._write(logging.CRITICAL, message, component, exc_info)

    def _write(self, level, message, component="", exc_info=False):
        text = f"[{component}] {message}" if component else str(message)
        self.logger.log(level, text, exc_info=exc_info)
        for handler in self.logger.handlers:
            handler.flush()

    # ------------------------------------------------------------------
    # Shop events
    # ------------------------------------------------------------------

    def log_order_finalized(self, order_id, item_count, total_amount, deposit):
        self.info(
            f"Order {order_id} - Finalized with {item_count} item(s), "
            f"total {total_amount}, deposit {deposit}",
            component="Orders"
        )

    def log_store_write(self, kind, record_count, path):
        self.info(f"Saved {record_count} {kind} record(s) to {path}", component="Store")

    def log_sms_call(self, provider, to_numbers, success):
        """Outbound SMS summary. Credentials are never passed in here."""
        outcome = 'OK' if success else 'FAILED'
        self.info(f"SMS via {provider} to {to_numbers} - {outcome}", component="SMS")


_shop_logger = None


def get_logger(log_level=None):
    """Process-wide ShopLogger, built from config on first use"""
    global _shop_logger
    if _shop_logger is None:
        import config
        _shop_logger = ShopLogger(
            log_dir=config.LOG_DIR,
            log_level=log_level or config.LOG_LEVEL,
            max_mb=config.LOG_FILE_MAX_MB,
            backup_count=config.LOG_FILE_BACKUP_COUNT,
        )
    return _shop_logger
