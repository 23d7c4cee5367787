#!/usr/bin/env python3
"""
Debug Logger for ccmkit
Provides centralized logging for spectral integration, fitting and validation diagnostics
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional
import platform
from datetime import datetime, timedelta


LOG_DIR_ENV = "CCMKIT_LOG_DIR"
LOGGER_NAME = "ccmkit"


class CCMDebugLogger:
    """Centralized logger shared by all ccmkit modules"""

    _instance: Optional['CCMDebugLogger'] = None
    _logger: Optional[logging.Logger] = None
    _log_file: Optional[Path] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize the logger; file output only when CCMKIT_LOG_DIR is set"""
        self._log_file = self._get_log_file_path()
        self._ensure_log_directory()
        self._setup_logger()

        if self._log_file:
            self.info("=" * 60)
            self.info(f"ccmkit logger initialized at {datetime.now()}")
            self.info(f"Platform: {platform.system()} {platform.release()}")
            self.info(f"Python: {sys.version}")
            self.info("=" * 60)

    def _get_log_file_path(self) -> Optional[Path]:
        """Get the path for the log file, or None when file logging is disabled"""
        log_dir = os.environ.get(LOG_DIR_ENV)
        if not log_dir:
            return None
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(log_dir).expanduser() / f"ccmkit_debug_{timestamp}.log"

    def _ensure_log_directory(self):
        """Ensure the log directory exists and cleanup old logs"""
        if self._log_file:
            try:
                self._log_file.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                print(f"Warning: Could not create log directory {self._log_file.parent}: {e}")
                self._log_file = None
                return
            self._cleanup_old_logs()

    def _cleanup_old_logs(self):
        """Remove log files older than 30 days"""
        cutoff_date = datetime.now() - timedelta(days=30)
        for log_file in self._log_file.parent.glob("ccmkit_debug_*.log"):
            try:
                if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff_date:
                    log_file.unlink()
            except (OSError, ValueError):
                continue

    def _setup_logger(self):
        """Set up the logger with console and optional file handlers"""
        self._logger = logging.getLogger(LOGGER_NAME)
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)8s] %(name)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if self._log_file:
            try:
                file_handler = logging.FileHandler(self._log_file, encoding='utf-8')
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(formatter)
                self._logger.addHandler(file_handler)
            except OSError as e:
                print(f"Warning: Could not set up file logging: {e}")

        # Console handler (WARNING and above; the validation summary is INFO)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        self._logger.addHandler(console_handler)

        self._logger.propagate = False

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, message: str, module: Optional[str]):
        module_prefix = f"[{module}] " if module else ""
        self._logger.log(level, f"{module_prefix}{message}", stacklevel=3)

    def debug(self, message: str, module: str = None):
        """Log debug message"""
        self._log(logging.DEBUG, message, module)

    def info(self, message: str, module: str = None):
        """Log info message"""
        self._log(logging.INFO, message, module)

    def warning(self, message: str, module: str = None):
        """Log warning message"""
        self._log(logging.WARNING, message, module)


# Global logger instance
debug_logger = CCMDebugLogger()

# Convenience functions
def debug(message: str, module: str = None):
    """Log debug message"""
    debug_logger.debug(message, module)

def info(message: str, module: str = None):
    """Log info message"""
    debug_logger.info(message, module)

def warning(message: str, module: str = None):
    """Log warning message"""
    debug_logger.warning(message, module)
