"""
Structured logging for session, vector and extraction operations.
"""

import logging
import os
from typing import Any, Dict


class StructuredLogger:
    """Structured logger for session lifecycle, indexing, search and extraction."""

    def __init__(self, name: str = "docsearch"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_session_event(self, operation: str, session_id: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a session lifecycle event."""
        log_details = {"session_id": session_id}
        if details:
            log_details.update(details)

        level = logging.INFO if status == "success" else logging.WARNING
        self.log_operation(f"session.{operation}", status, log_details, level)

    def log_vector_operation(self, operation: str, session_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log an indexing or search operation against a session."""
        log_details = {"session_id": session_id}
        if details:
            log_details.update(details)

        if status == "success":
            level = logging.INFO
        elif status == "fatal":
            level = logging.ERROR
        else:
            level = logging.WARNING
        self.log_operation(f"vector.{operation}", status, log_details, level)

    def log_extraction(self, filename: str, start_time: float, end_time: float, status: str = "success", details: Dict[str, Any] = None):
        """Log a document extraction with its duration."""
        duration_ms = round((end_time - start_time) * 1000, 2)
        log_details = {"filename": filename, "duration_ms": duration_ms}
        if details:
            log_details.update(details)

        level = logging.INFO if status == "success" else logging.ERROR
        self.log_operation("extraction.pdf", status, log_details, level)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def truncate(text: str, limit: int = 50) -> str:
    """Shorten free text (queries, page text) before it reaches a log line."""
    if text is None:
        return ""
    return text[:limit] + "..." if len(text) > limit else text


# Global logger instance
logger = StructuredLogger()
