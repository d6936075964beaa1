"""
Utility Functions Module

Provides essential utilities:
- File I/O (schema documents, archives, CSV previews)
- Logging configuration
- Stable hashing
- Path management
"""

import re
import sys
import hashlib
import logging
from pathlib import Path
from typing import Dict, Optional, Union
from logging.handlers import RotatingFileHandler

import pandas as pd


class FileHandler:
    """
    Handles file input/output operations for the shells

    The engine itself never touches the filesystem.
    """

    @staticmethod
    def read_document(filepath: Union[str, Path]) -> bytes:
        """
        Read a schema document as raw bytes

        Args:
            filepath: Path to the document

        Returns:
            File contents
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        return filepath.read_bytes()

    @staticmethod
    def write_bytes(data: bytes, filepath: Union[str, Path]) -> Path:
        """
        Write a binary file, creating parent directories

        Args:
            data: Bytes to write
            filepath: Output path

        Returns:
            Path written
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(data)
        logging.info(f"File written successfully: {filepath}")
        return filepath

    @staticmethod
    def write_frames(frames: Dict[str, pd.DataFrame], directory: Union[str, Path]) -> Dict[str, Path]:
        """
        Write one CSV file per table

        Args:
            frames: Mapping of table name to DataFrame
            directory: Output directory

        Returns:
            Mapping of table name to written path
        """
        directory = PathManager.ensure_dir(directory)
        written = {}
        for name, frame in frames.items():
            filepath = directory / f"{PathManager.clean_filename(name)}.csv"
            frame.to_csv(filepath, index=False)
            written[name] = filepath
        logging.info(f"Wrote {len(written)} CSV file(s) to {directory}")
        return written


class LoggerConfig:
    """
    Logging configuration manager

    Sets up consistent logging across the application
    """

    @staticmethod
    def setup_logger(
        name: str = "sqlseed",
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        log_to_console: bool = True,
        log_format: Optional[str] = None
    ) -> logging.Logger:
        """
        Setup and configure logger

        Args:
            name: Logger name
            level: Logging level
            log_file: Optional file path for file logging
            log_to_console: Whether to log to console
            log_format: Custom log format

        Returns:
            Configured logger
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Remove existing handlers
        logger.handlers.clear()

        if log_format is None:
            log_format = (
                '%(asctime)s - %(name)s - %(levelname)s - '
                '%(filename)s:%(lineno)d - %(message)s'
            )

        formatter = logging.Formatter(log_format)

        # Console handler (stderr keeps stdout free for command output)
        if log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # File handler
        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger


class PathManager:
    """Path and file name helpers"""

    @staticmethod
    def ensure_dir(path: Union[str, Path]) -> Path:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def clean_filename(filename: str) -> str:
        """
        Clean filename to be filesystem-safe

        Args:
            filename: Original filename

        Returns:
            Cleaned filename
        """
        # Remove invalid characters
        filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '_', filename)
        # Remove leading/trailing spaces and dots
        filename = filename.strip('. ')
        return filename or '_'


def stable_hash_bytes(data: bytes) -> str:
    """Lowercase hex SHA-256 digest of bytes"""
    return hashlib.sha256(data).hexdigest()


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Quick logging setup

    Args:
        level: Logging level
        log_file: Optional log file path
    """
    return LoggerConfig.setup_logger(level=level, log_file=log_file)
