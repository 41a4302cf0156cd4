"""
Loguru configuration.

The package never configures logging on import. The application embedding it
calls these from its startup and shutdown hooks, e.g. a FastAPI lifespan:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger()
        configure_stdlib_logging()
        yield
        await get_session_boundary().token_service.store.close()
        shutdown_logger()
"""

import logging
import os
import sys
import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

from loguru import logger

from authcore.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# ============================================
# CONTEXT VARIABLES FOR REQUEST TRACKING
# ============================================
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# ============================================
# LOG LEVEL MAPPING
# ============================================

LOG_LEVELS = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    0: "NOTSET",
}


# ============================================
# CUSTOM FILTER FOR CORRELATION AND PROCESS ID
# ============================================


def correlation_filter(record: "Record") -> bool:
    """
    Add correlation ID and process ID to log records.
    This allows tracking requests across the application and
    differentiating between different worker processes.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, nothing is filtered out.
    """
    record["extra"]["request_id"] = request_id_var.get() or str(uuid.uuid4())[:8]
    record["extra"]["process_id"] = os.getpid()

    return True


# ============================================
# INTERCEPT HANDLER FOR STANDARD LOGGING
# ============================================


class InterceptHandler(logging.Handler):
    """
    Intercepts standard logging and redirects to Loguru.
    Used so that redis and uvicorn loggers share the Loguru configuration.
    """

    def emit(self, record: logging.LogRecord):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller from where the logging call originated
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ============================================
# MAIN LOGGER SETUP FUNCTION
# ============================================


def setup_logger():
    """
    Configure Loguru logger for a multi-worker service.

    Features:
    - Thread and process safe with enqueue=True
    - Single unified log file with process IDs for worker differentiation
    - 3 months retention, 10MB rotation, gzip compression
    - Different outputs for console vs file

    Call once at process startup.
    """
    # Remove default handler to avoid duplicate logs
    logger.remove()

    log_level = LOG_LEVELS.get(settings.log_level, "INFO")

    # ============================================
    # CONSOLE OUTPUT: Simplified, colored format
    # ============================================
    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>PID:{extra[process_id]}</magenta> | "
        "<yellow>ReqID:{extra[request_id]}</yellow> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stdout,
        format=console_format,
        level=logging.DEBUG if settings.current_environment == Environment.DEV else log_level,
        colorize=True,
        enqueue=True,
        filter=correlation_filter,
    )

    # ============================================
    # FILE OUTPUT: Detailed format with full context
    # ============================================
    if settings.log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
            "{level: <8} | "
            "PID:{extra[process_id]} | "
            "ReqID:{extra[request_id]} | "
            "{name}:{function}:{line} | "
            "{message}"
        )

        logger.add(
            settings.log_dir / "authcore.log",
            format=file_format,
            level=log_level,
            rotation="10 MB",
            retention="3 months",
            compression="gz",
            enqueue=True,
            serialize=False,
            filter=correlation_filter,
            backtrace=True,
            # Locals in tracebacks would leak token strings into the log file
            diagnose=False,
        )

    logger.info(
        f"Logger initialized | "
        f"Environment: {settings.current_environment.value} | "
        f"Level: {log_level}"
    )


def configure_stdlib_logging():
    """
    Route standard library logging (redis, uvicorn, ...) through Loguru.

    Call after setup_logger().
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in logging.root.manager.loggerDict.keys():
        if name.startswith(("uvicorn", "redis")):
            logging.getLogger(name).handlers = [InterceptHandler()]
            logging.getLogger(name).propagate = False

    logger.debug("Standard library logging configured to use Loguru")


def shutdown_logger():
    """
    Flush all pending logs.
    """
    logger.info("Shutting down logger...")

    # Let Loguru finish processing queued logs
    logger.complete()
