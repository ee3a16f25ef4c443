#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Logging for the Mementos service.

Each component ('database', 'api', 'cli') writes to its own rotating log
in the configured log directory; errors from every component also go to
a shared ``errors.log``. Entries are one line each, tagged with their
kind and followed by a JSON payload:

    OPERATION - create_memory: {"memory_id": 12}
    REQUEST - PATCH /api/memories/12 -> 409: {"duration_ms": 3.1}

Code that may run without a logger uses ``safe_logger(logger)`` rather
than checking for None.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ERROR_LOG_NAME = "errors.log"


def _format_details(details: Optional[Dict[str, Any]]) -> str:
    return json.dumps(details, default=str, sort_keys=True) if details else ""


def format_cli_error(error: Exception) -> str:
    """One-line error message shown to CLI users."""
    return f"❌ {type(error).__name__}: {error}"


class MementosLogger:
    """
    Component logger with rotating file output.

    Attributes:
        log_dir: Directory for log files
        component_name: Component this logger writes for
        main_logger: Logger for ``<component>.log``
        error_logger: Logger for the shared ``errors.log``
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "mementos",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        console_level: int = logging.WARNING,
    ) -> None:
        """
        Args:
            log_dir: Directory for log files (created if missing)
            component_name: 'database', 'api', 'cli', ...
            max_bytes: Size at which a log file is rotated
            backup_count: Rotated files to keep
            console_level: Minimum level echoed to stderr
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.console_level = console_level

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.main_logger = self._build_logger("operations", logging.DEBUG)
        self.error_logger = self._build_logger("errors", logging.ERROR)

        self.main_logger.addHandler(
            self._file_handler(self.log_dir / f"{component_name}.log", logging.DEBUG)
        )
        self.error_logger.addHandler(
            self._file_handler(self.log_dir / ERROR_LOG_NAME, logging.ERROR)
        )

        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self.main_logger.addHandler(console)

    def _build_logger(self, channel: str, level: int) -> logging.Logger:
        logger = logging.getLogger(f"mementos.{self.component_name}.{channel}")
        logger.setLevel(level)
        logger.propagate = False
        # Loggers are process-wide; a second instance for the same component
        # must not stack handlers on the first one's.
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        return logger

    def _file_handler(self, file_path: Path, level: int) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    def close(self) -> None:
        """Flush and detach every handler owned by this logger."""
        for logger in (self.main_logger, self.error_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    # ---- Entries ----
    def _log(self, level: int, tag: str, message: str, details: Optional[Dict[str, Any]]) -> None:
        payload = _format_details(details)
        text = f"{tag} - {message}: {payload}" if payload else f"{tag} - {message}"
        self.main_logger.log(level, text, stacklevel=3)

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record a completed operation (always written, even with empty details)."""
        self.main_logger.info(
            f"OPERATION - {operation}: {json.dumps(details or {}, default=str, sort_keys=True)}",
            stacklevel=2,
        )

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
        user_id: Optional[str] = None,
    ) -> None:
        """
        Record one HTTP request.

        Server errors are logged at WARNING so they also reach the console.
        """
        details: Dict[str, Any] = {"duration_ms": round(duration_ms, 1)}
        if user_id:
            details["user"] = user_id
        level = logging.WARNING if status_code >= 500 else logging.INFO
        self._log(level, "REQUEST", f"{method} {path} -> {status_code}", details)

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, "DEBUG", message, details)

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, "INFO", message, details)

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, "WARNING", message, details)

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Write an error, its context and the active traceback to errors.log.

        Args:
            error: Exception that occurred
            context: Where it happened (operation, ids, request path)
        """
        lines = [f"ERROR - {type(error).__name__}: {error}"]
        if context:
            lines.append("Context: " + ", ".join(f"{k}={v}" for k, v in context.items()))
        if sys.exc_info()[0] is not None:
            lines.append(f"Traceback:\n{traceback.format_exc()}")
        self.error_logger.error("\n".join(lines))

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log an error raised by a CLI command and build the message to show.

        Args:
            error: Exception to report
            context: Command context (defaults to ``{"source": "cli"}``)
            show_traceback: Append the traceback to the returned message

        Returns:
            Message for stderr

        Examples:
            >>> logger.log_cli_error(DatabaseError("Connection failed"))
            '❌ DatabaseError: Connection failed'
        """
        self.log_error(error, context or {"source": "cli"})
        message = format_cli_error(error)
        if show_traceback:
            return f"{message}\n\n{traceback.format_exc()}"
        return message


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Report a failed CLI command and exit.

    The logger and verbose flag are read from ``ctx.obj``; with --verbose
    the traceback is printed as well.

    Note:
        Never returns; always calls sys.exit()
    """
    logger: Optional[MementosLogger] = ctx.obj.get("logger")
    context = {"operation": operation, **(additional_context or {})}

    message = safe_logger(logger).log_cli_error(
        error, context, show_traceback=ctx.obj.get("verbose", False)
    )
    click.echo(message, err=True)
    sys.exit(exit_code)


class NullLogger:
    """Stand-in with the MementosLogger interface that writes nothing."""

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float,
                    user_id: Optional[str] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return format_cli_error(error)


_null_logger = NullLogger()


def safe_logger(logger: Optional[MementosLogger]) -> MementosLogger:
    """
    Return the logger, or a NullLogger when it is None.

    Usage:
        safe_logger(self.logger).log_warning("place_override", {...})
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]
