import asyncio
import functools
from typing import TypeVar, Callable, Optional, Type
from loguru import logger
from ..exceptions import MediaScribeException, ProviderException

T = TypeVar('T')


def log_exceptions(
    log_level: str = "ERROR",
    include_traceback: bool = True,
    custom_message: Optional[str] = None
):
    """
    Decorator to log exceptions before re-raising them.

    Args:
        log_level: Log level for exception logging
        include_traceback: Whether to include traceback in log
        custom_message: Custom message to include in log
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                message = custom_message or f"Exception in {func.__name__}"
                if include_traceback:
                    logger.opt(exception=True).log(log_level, f"{message}: {e}")
                else:
                    logger.log(log_level, f"{message}: {e}")
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                message = custom_message or f"Exception in {func.__name__}"
                if include_traceback:
                    logger.opt(exception=True).log(log_level, f"{message}: {e}")
                else:
                    logger.log(log_level, f"{message}: {e}")
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def _convert(e: Exception, exception_map: dict) -> Exception:
    # Project exceptions pass through untouched so subclasses keep their type
    if isinstance(e, MediaScribeException):
        return e
    for source_exc, target_exc in exception_map.items():
        if isinstance(e, source_exc):
            converted = target_exc(str(e), details={"original_exception": type(e).__name__})
            converted.__cause__ = e
            return converted
    return e


def convert_exceptions(exception_map: dict):
    """
    Decorator to convert library exceptions to mediascribe exceptions.

    Args:
        exception_map: Dictionary mapping exception types to mediascribe exception types
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                raise _convert(e, exception_map)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                raise _convert(e, exception_map)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def handle_provider_error(
        e: Exception,
        provider_name: str,
        exception_cls: Type[ProviderException] = ProviderException,
    ) -> ProviderException:
        """Convert provider-specific exceptions to a ProviderException (or subclass)."""
        error_details = {
            "provider": provider_name,
            "original_exception": type(e).__name__,
            "message": str(e)
        }

        logger.error(f"Provider {provider_name} error: {e}")
        return exception_cls(
            f"Provider {provider_name} failed: {e}",
            error_code="PROVIDER_ERROR",
            details=error_details
        )
