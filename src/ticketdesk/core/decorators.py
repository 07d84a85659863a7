"""
Centralized error handling decorators for database operations.
Wrap service-layer coroutines so database failures are classified and
logged in one place before they propagate.
"""
import functools
import logging
from typing import Any, Callable, Optional

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import TicketDeskError

logger = logging.getLogger(__name__)


class DatabaseErrorHandler:
    """Centralized database error handling utilities."""

    DATABASE_EXCEPTIONS = (SQLAlchemyError, ConnectionError)

    @staticmethod
    def handle_database_error(
        exc: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> tuple[bool, str]:
        """
        Classify a database error and build its log message.

        Returns:
            Tuple of (is_recoverable, error_message)
        """
        context_str = f" | Context: {context}" if context else ""

        if isinstance(exc, IntegrityError):
            return False, f"Database integrity error during {operation}: {exc}{context_str}"
        if isinstance(exc, (ConnectionError, DisconnectionError)):
            return True, f"Database connection error during {operation}: {exc}{context_str}"
        if isinstance(exc, TimeoutError):
            return True, f"Database timeout during {operation}: {exc}{context_str}"
        if isinstance(exc, OperationalError):
            return True, f"Database operational error during {operation}: {exc}{context_str}"
        if isinstance(exc, StatementError):
            return False, f"Database statement error during {operation}: {exc}{context_str}"
        return False, f"Unexpected database error during {operation}: {type(exc).__name__}: {exc}{context_str}"


def handle_database_exceptions(
    operation_name: Optional[str] = None,
    log_level: str = "error"
) -> Callable:
    """
    Decorator to wrap async database operations with error logging.

    Domain errors (TicketDeskError) pass through untouched; database errors
    are classified, logged and re-raised.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            operation = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except TicketDeskError:
                raise
            except DatabaseErrorHandler.DATABASE_EXCEPTIONS as exc:
                is_recoverable, error_msg = DatabaseErrorHandler.handle_database_error(
                    exc, operation, {"function": func.__name__}
                )
                getattr(logger, log_level)(f"{error_msg} | Recoverable: {is_recoverable}")
                raise

        return async_wrapper

    return decorator


def database_transaction(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator to commit the session on success and roll back on any error.

    The AsyncSession is looked up among the positional and keyword arguments.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            operation = operation_name or func.__name__
            db_session = next(
                (arg for arg in (*args, *kwargs.values()) if isinstance(arg, AsyncSession)),
                None,
            )
            if db_session is None:
                logger.warning(f"No AsyncSession found for transaction operation {operation}")
                return await func(*args, **kwargs)

            try:
                result = await func(*args, **kwargs)
                await db_session.commit()
                logger.debug(f"Transaction committed for {operation}")
                return result
            except Exception:
                try:
                    await db_session.rollback()
                    logger.debug(f"Transaction rolled back for {operation}")
                except SQLAlchemyError as rollback_exc:
                    logger.error(f"Failed to rollback transaction for {operation}: {rollback_exc}")
                raise

        return async_wrapper

    return decorator


def log_database_operation(operation: str, level: str = "debug") -> Callable:
    """Decorator to log the start, completion and failure of an operation."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            logger_method = getattr(logger, level)
            logger_method(f"Starting {operation} via {func.__name__}")
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                logger_method(f"Failed {operation} via {func.__name__}: {exc}")
                raise
            logger_method(f"Completed {operation} via {func.__name__}")
            return result

        return async_wrapper

    return decorator


def critical_database_operation(func=None, operation_name: Optional[str] = None) -> Callable:
    """
    Read operation that must succeed: errors are logged and re-raised.

    Can be used with or without parentheses:
        @critical_database_operation
        @critical_database_operation("operation_name")
    """
    def decorator(f: Callable) -> Callable:
        return handle_database_exceptions(operation_name=operation_name)(f)

    if func is None:
        return decorator
    if callable(func):
        return decorator(func)
    return critical_database_operation(operation_name=func)


def transactional_database_operation(func=None, operation_name: Optional[str] = None) -> Callable:
    """
    Combined decorator for transactional database operations with error handling.

    Can be used with or without parentheses:
        @transactional_database_operation
        @transactional_database_operation("operation_name")
    """
    def decorator(f: Callable) -> Callable:
        transaction_decorated = database_transaction(operation_name=operation_name)(f)
        return handle_database_exceptions(operation_name=operation_name)(transaction_decorated)

    if func is None:
        return decorator
    if callable(func):
        return decorator(func)
    return transactional_database_operation(operation_name=func)
