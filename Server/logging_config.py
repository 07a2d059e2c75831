"""
VersionVault Server - Logging Configuration

Sets up console and rotating file logging for the server process.
"""

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_configured = False


def ConfigureLogging(log_dir: str = "logs", log_level: str = "INFO") -> None:
    """
    Configure logging to write to both console and file

    Safe to call more than once; only the first call installs handlers.

    Args:
        log_dir: Directory for log files (created if missing)
        log_level: Root log level name (e.g. "INFO", "DEBUG")
    """
    global _configured

    if _configured:
        return

    logs_path = Path(log_dir)
    logs_path.mkdir(parents=True, exist_ok=True)

    # One log file per day the server was started
    log_filename = logs_path / f"versionvault-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            # Max 10MB per file, keep 10 backup files
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )
    _configured = True
