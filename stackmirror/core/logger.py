"""
Logging and Error Handling System

This module provides centralized logging configuration and error tracking
for stackmirror. Module loggers created with logging.getLogger(__name__) sit
under the "stackmirror" logger and inherit its handlers.
"""

import logging
import logging.handlers
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any


APP_NAME = "stackmirror"


class _BelowLevelFilter(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


class MirrorLogger:
    """
    Centralized logging system for stackmirror.

    Progress goes to stdout, warnings and errors go to stderr, and an optional
    log directory receives rotating detailed and error-only log files.
    """

    def __init__(self, log_dir: Optional[str] = None, app_name: str = APP_NAME):
        """
        Initialize the logging system.

        Args:
            log_dir: Directory to store log files (None disables file logging)
            app_name: Name of the root application logger
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Set up the main application logger with console and file handlers.

        Args:
            level: Console logging level (default: INFO)

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)

        # Re-initialising replaces handlers instead of stacking them
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(level)
        stdout_handler.addFilter(_BelowLevelFilter(logging.WARNING))
        stdout_handler.setFormatter(console_formatter)
        logger.addHandler(stdout_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(max(level, logging.WARNING))
        stderr_handler.setFormatter(console_formatter)
        logger.addHandler(stderr_handler)

        if self.log_dir is not None:
            log_file = self.log_dir / f"{self.app_name}.log"
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            logger.addHandler(file_handler)

            error_file = self.log_dir / f"{self.app_name}_errors.log"
            error_handler = logging.handlers.RotatingFileHandler(
                error_file,
                maxBytes=5*1024*1024,  # 5MB
                backupCount=3,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)
            logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            name: Name of the component

        Returns:
            Logger instance under the application logger
        """
        full_name = f"{self.app_name}.{name}"

        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)

        return self.loggers[full_name]

    def log_system_info(self):
        """Log system information for debugging."""
        logger = self.get_logger('system')

        logger.debug("=== stackmirror started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        if self.log_dir is not None:
            logger.debug(f"Log directory: {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Tracks errors and warnings that occur while processing individual posts.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: list = []
        self.warnings: list = []

    def log_error(self,
                  error: Exception,
                  context: str = None,
                  slug: str = None,
                  additional_info: Dict[str, Any] = None) -> str:
        """
        Log an error with context information.

        Args:
            error: The exception that occurred
            context: Pipeline stage where the error occurred
            slug: Post slug being processed when the error occurred
            additional_info: Additional information about the error

        Returns:
            Error ID for tracking
        """
        error_id = f"ERR_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.errors):03d}"

        error_data = {
            'id': error_id,
            'timestamp': datetime.now(),
            'type': type(error).__name__,
            'message': str(error),
            'context': context,
            'slug': slug,
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
            'additional_info': additional_info or {}
        }

        self.errors.append(error_data)

        log_message = f"[{error_id}] {error_data['type']}: {error_data['message']}"
        if context:
            log_message += f" (Stage: {context})"
        if slug:
            log_message += f" (Post: {slug})"

        self.logger.error(log_message)
        self.logger.debug(f"[{error_id}] Full traceback:\n{error_data['traceback']}")

        return error_id

    def log_warning(self,
                    message: str,
                    context: str = None,
                    slug: str = None) -> str:
        """
        Log a warning with context information.

        Returns:
            Warning ID for tracking
        """
        warning_id = f"WARN_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{len(self.warnings):03d}"

        self.warnings.append({
            'id': warning_id,
            'timestamp': datetime.now(),
            'message': message,
            'context': context,
            'slug': slug
        })

        log_message = f"[{warning_id}] {message}"
        if context:
            log_message += f" (Stage: {context})"
        if slug:
            log_message += f" (Post: {slug})"

        self.logger.warning(log_message)

        return warning_id

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all errors and warnings.

        Returns:
            Dictionary with error statistics and details
        """
        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'error_types': self._count_error_types(),
            'skipped_slugs': [e['slug'] for e in self.errors if e['slug']],
            'recent_errors': self.errors[-5:] if self.errors else [],
            'recent_warnings': self.warnings[-5:] if self.warnings else []
        }

    def _count_error_types(self) -> Dict[str, int]:
        """Count errors by type."""
        type_counts = {}
        for error in self.errors:
            error_type = error['type']
            type_counts[error_type] = type_counts.get(error_type, 0) + 1
        return type_counts

    def save_error_report(self, output_path: str):
        """
        Write every recorded error and warning to a plain-text report.

        Raises:
            OSError: If the report cannot be written
        """
        lines = [
            "STACKMIRROR ERROR REPORT",
            "=" * 50,
            "",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"Skipped posts: {len(self.errors)}",
            f"Warnings: {len(self.warnings)}",
        ]

        for heading, records in (("ERRORS", self.errors), ("WARNINGS", self.warnings)):
            if not records:
                continue
            lines += ["", f"{heading}:", "-" * 30]
            for rec in records:
                lines.append(f"[{rec['id']}] {rec['timestamp']}")
                if 'type' in rec:
                    lines.append(f"{rec['type']}: {rec['message']}")
                else:
                    lines.append(rec['message'])
                if rec['context']:
                    lines.append(f"Stage: {rec['context']}")
                if rec['slug']:
                    lines.append(f"Post: {rec['slug']}")
                if rec.get('traceback'):
                    lines.append(rec['traceback'].rstrip())
                lines.append("-" * 30)

        Path(output_path).write_text("\n".join(lines) + "\n", encoding='utf-8')
        self.logger.info(f"Error report saved to: {output_path}")


# Global logger instance
_logger_instance: Optional[MirrorLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Name of the component (optional)

    Returns:
        Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = MirrorLogger()

    if name:
        return _logger_instance.get_logger(name)
    return logging.getLogger(_logger_instance.app_name)


def initialize_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files (None for console only)
        level: Console logging level
    """
    global _logger_instance
    _logger_instance = MirrorLogger(log_dir)
    logger = _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()
    return logger


def create_error_tracker(logger_name: str = None) -> ErrorTracker:
    """
    Create an error tracker instance.

    Args:
        logger_name: Name of the logger to use

    Returns:
        ErrorTracker instance
    """
    return ErrorTracker(get_logger(logger_name))
