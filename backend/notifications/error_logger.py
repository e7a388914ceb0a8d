"""
Error logging utility for notification system.

Writes digest send failures to timestamped report files for debugging.
"""

import os
import uuid
from datetime import datetime
from typing import Any


def log_notification_error(
    error_type: str,
    error_message: str,
    context: dict[str, Any] | None = None,
    log_dir: str | None = None,
) -> str:
    """
    Log a notification error to a timestamped file.

    Args:
        error_type: Type of error (e.g., 'fetching', 'sending')
        error_message: The error message
        context: Optional dictionary with additional context (user_id, cutoff, etc.)
        log_dir: Directory for reports (defaults to notifications/logs)

    Returns:
        Path to the log file created
    """
    log_dir = log_dir or os.path.join(os.path.dirname(__file__), "logs")
    os.makedirs(log_dir, exist_ok=True)

    # Random suffix keeps reports from concurrent sends apart
    now = datetime.now()
    filename = os.path.join(
        log_dir, f"notification_error_{error_type}_{now.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}.txt"
    )

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Notification Error Report - {now}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Error Type: {error_type}\n")
        f.write(f"Error Message: {error_message}\n\n")

        if context:
            f.write("Context:\n")
            f.write("-" * 60 + "\n")
            for key, value in context.items():
                f.write(f"{key}: {value}\n")

    return filename
