"""
Error Handler for MetaPoker

Provides the decorator for socket handlers and the process-level hooks that
turn fatal errors and termination signals into an orderly shutdown.
"""

import logging
import os
import signal
import sys
import threading
import time
from functools import wraps
from typing import Callable

from src.core.errors import GameError
from src.services.error_response_factory import ErrorResponseFactory, generate_error_id
from src.services.metrics_service import get_metrics_service

logger = logging.getLogger(__name__)


def with_error_handling(func):
    """
    Decorator for Socket.IO event handlers to provide consistent error handling.

    GameErrors are reported to the triggering connection with their own code;
    anything else is logged with its traceback and reported as INTERNAL_ERROR.
    Other connections are never affected. When a metrics service is set,
    every call is timed and every failure is counted.

    Args:
        func: Socket.IO event handler function

    Returns:
        Wrapped function with error handling
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        metrics_service = get_metrics_service()
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if metrics_service is not None:
                metrics_service.record_error()
            factory = ErrorResponseFactory()
            error_code, error_message, error_id = factory.handle_exception(e, func.__name__)
            details = e.details if isinstance(e, GameError) else None
            factory.emit_error(error_code, error_message, details, error_id)
        finally:
            if metrics_service is not None:
                metrics_service.record_response_time(func.__name__, (time.perf_counter() - start_time) * 1000)
    return wrapper


def _run_shutdown(shutdown: Callable[[], None]):
    try:
        shutdown()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


def install_process_error_handlers(shutdown: Callable[[], None], exit_func: Callable[[int], None] = os._exit):
    """
    Route uncaught exceptions to a logged, orderly process exit.

    Installs ``sys.excepthook`` for the main thread and ``threading.excepthook``
    for background threads. Each hook logs the error at CRITICAL with an
    errorId, runs ``shutdown`` and exits with status 1.

    Args:
        shutdown: Cleanup callable, e.g. stopping the timer service
        exit_func: Process exit function (injected by tests)
    """
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        error_id = generate_error_id()
        logger.critical(f"[{error_id}] Uncaught exception: {exc_value}",
                        exc_info=(exc_type, exc_value, exc_traceback))
        _run_shutdown(shutdown)
        exit_func(1)

    def handle_thread_exception(args):
        if args.exc_type is SystemExit:
            return
        error_id = generate_error_id()
        thread_name = args.thread.name if args.thread else 'unknown'
        logger.critical(f"[{error_id}] Uncaught exception in thread {thread_name}: {args.exc_value}",
                        exc_info=(args.exc_type, args.exc_value, args.exc_traceback))
        _run_shutdown(shutdown)
        exit_func(1)

    sys.excepthook = handle_exception
    threading.excepthook = handle_thread_exception
    logger.debug("Process error handlers installed")


def install_signal_handlers(shutdown: Callable[[], None], exit_func: Callable[[int], None] = sys.exit):
    """
    Shut down gracefully on SIGTERM and SIGINT.

    Args:
        shutdown: Cleanup callable
        exit_func: Process exit function (injected by tests)
    """
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down gracefully")
        _run_shutdown(shutdown)
        exit_func(0)

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)
