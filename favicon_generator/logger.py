"""
Logging utility for the favicon generator.

This module provides centralized logging functionality that:
- Sends progress messages to the console (stderr, so stdout stays free for
  the HTML snippet)
- Optionally writes the full run to a timestamped log file
- Archives older run logs to a folder
"""

import logging
import shutil
import sys
from datetime import datetime
from pathlib import Path


class LogSetup:
    """Sets up logging for the application with console and optional file handlers."""

    def __init__(self, log_dir=None, archive_dir=None, verbose=False):
        """
        Initialize logging setup.

        Args:
            log_dir: Directory to store the run log. None disables file logging.
            archive_dir: Directory for older run logs (default: <log_dir>/archive)
            verbose: Show DEBUG messages on the console
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.archive_dir = None
        self.verbose = verbose

        if self.log_dir is not None:
            self.archive_dir = Path(archive_dir) if archive_dir else self.log_dir / "archive"
            # Create directories if they don't exist
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.archive_dir.mkdir(parents=True, exist_ok=True)

    def setup_logging(self):
        """
        Configure logging.

        Returns:
            tuple: (logging.Logger, log file path or None)
        """
        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG)

        # Remove any existing handlers to avoid duplicates
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if self.verbose else logging.INFO)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        log_filepath = None
        if self.log_dir is not None:
            self._archive_existing_logs()

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_filepath = self.log_dir / f"run_{timestamp}.log"

            file_handler = logging.FileHandler(log_filepath, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # PIL logs every chunk it parses at DEBUG level
        for noisy_logger in ("PIL", "cairosvg", "cairocffi"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

        return logger, log_filepath

    def _archive_existing_logs(self):
        """Move earlier run logs from the log directory into the archive."""
        for log_file in self.log_dir.glob("run_*.log"):
            if log_file.is_file():
                try:
                    shutil.move(str(log_file), str(self.archive_dir / log_file.name))
                except OSError as e:
                    print(f"Warning: Could not archive log file {log_file.name}: {e}", file=sys.stderr)


def setup_logging(log_dir=None, archive_dir=None, verbose=False):
    """
    Convenience function to set up logging.

    Args:
        log_dir: Directory to store the run log, or None for console only
        archive_dir: Directory to store archived logs
        verbose: Show DEBUG messages on the console

    Returns:
        tuple: (logger, log_filepath)
    """
    log_setup = LogSetup(log_dir, archive_dir, verbose)
    return log_setup.setup_logging()
