"""
Logging configuration for the TicketDesk application.
Provides structured logging with different levels and formats.

File handlers sit behind a QueueHandler so log writes never block the
event loop; a QueueListener does the file I/O in a separate thread.
"""

import atexit
import logging
import logging.handlers
import queue
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .middleware import CorrelationIdFilter


# Global queue listener for cleanup
_queue_listener: Optional[logging.handlers.QueueListener] = None


class LogConfig(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_file_logging: bool = True
    log_dir: str = "logs"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_console: bool = True


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    blue = "\x1b[34;21m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: blue,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def format(self, record):
        # Color a copy so other handlers see the plain levelname
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, self.grey)
        record.levelname = f"{color}{record.levelname}{self.reset}"
        return f"{super().format(record)}{self.reset}"


def _rotating_handler(config: LogConfig, filename: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        Path(config.log_dir) / filename,
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(getattr(logging, config.level.upper()))
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(correlation_id)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt=config.date_format,
        )
    )
    return handler


def setup_logging(config: Optional[LogConfig] = None) -> None:
    """Setup application logging with configuration.

    - Console handler writes directly (stdout is non-blocking)
    - File handlers run behind a QueueListener thread
    - Ticket lifecycle records also land in their own tickets.log
    """
    global _queue_listener

    if config is None:
        config = LogConfig()

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None

    level = getattr(logging, config.level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                datefmt=config.date_format,
            )
        )
        console_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(console_handler)

    file_handlers = []

    if config.enable_file_logging:
        Path(config.log_dir).mkdir(exist_ok=True)

        file_handlers.append(_rotating_handler(config, "app.log"))

        ticket_handler = _rotating_handler(config, "tickets.log")
        ticket_handler.addFilter(logging.Filter("ticket"))
        file_handlers.append(ticket_handler)

    if file_handlers:
        log_queue = queue.Queue(-1)
        queue_handler = logging.handlers.QueueHandler(log_queue)
        queue_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(queue_handler)

        _queue_listener = logging.handlers.QueueListener(
            log_queue,
            *file_handlers,
            respect_handler_level=True,
        )
        _queue_listener.start()

        atexit.register(stop_queue_listener)

    from .config import settings

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    if settings.database.echo:
        sqlalchemy_logger.setLevel(level)
    else:
        sqlalchemy_logger.setLevel(logging.WARNING)


def stop_queue_listener() -> None:
    """Stop the queue listener gracefully.

    Called automatically on exit via atexit.
    Can also be called manually during shutdown.
    """
    global _queue_listener

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None


class TicketLogger:
    """Structured logger for ticket lifecycle operations."""

    def __init__(self, name: str = "lifecycle"):
        self.logger = logging.getLogger(f"ticket.{name}")

    def ticket_created(self, ticket_id: int, ticket_code: str, created_by_id: int, category: str) -> None:
        """Log when a ticket is created."""
        self.logger.info(
            f"Ticket created | Ticket ID: {ticket_id} | Code: {ticket_code} | "
            f"Created By: {created_by_id} | Category: {category}"
        )

    def transition_accepted(self, ticket_id: int, current: str, target: str, user_id: int) -> None:
        """Log an accepted status transition."""
        self.logger.info(
            f"Status changed | Ticket ID: {ticket_id} | {current} -> {target} | "
            f"User ID: {user_id}"
        )

    def transition_rejected(self, ticket_id: int, current: str, target: str, user_id: int, reason: str) -> None:
        """Log a rejected status transition."""
        self.logger.warning(
            f"Status change rejected | Ticket ID: {ticket_id} | {current} -> {target} | "
            f"User ID: {user_id} | Reason: {reason}"
        )

    def ticket_assigned(self, ticket_id: int, assignee_id: Optional[int], user_id: int) -> None:
        """Log an assignment change."""
        self.logger.info(
            f"Ticket assigned | Ticket ID: {ticket_id} | Assignee: {assignee_id} | "
            f"User ID: {user_id}"
        )

    def ticket_deleted(self, ticket_id: int, ticket_code: str, user_id: int) -> None:
        """Log a ticket deletion."""
        self.logger.warning(
            f"Ticket deleted | Ticket ID: {ticket_id} | Code: {ticket_code} | User ID: {user_id}"
        )

    def message_posted(self, ticket_id: int, message_id: int, sender_id: int) -> None:
        """Log a new thread message."""
        self.logger.debug(
            f"Message posted | Ticket ID: {ticket_id} | Message ID: {message_id} | "
            f"Sender ID: {sender_id}"
        )

    def sync_failed(self, operation: str, user_id: int, error: str, ticket_id: Optional[int] = None) -> None:
        """Log a failed background refresh."""
        context = f"User ID: {user_id}"
        if ticket_id is not None:
            context += f" | Ticket ID: {ticket_id}"
        self.logger.warning(f"Sync failed | Operation: {operation} | {context} | Error: {error}")
