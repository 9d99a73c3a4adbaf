"""Logging setup for CLI"""

import logging
import os

DEBUG_LOG_FILE = "spotistats_debug.log"


def setup_logging(debug: bool = False, log_file: str = DEBUG_LOG_FILE):
    """Configure the root logger

    Normal runs only show warnings. Debug runs log everything to the console
    and append to a debug log file.

    Args:
        debug: Whether debug mode is enabled
        log_file: File the debug log is appended to
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not debug:
        root_logger.setLevel(logging.WARNING)
        console_handler.setLevel(logging.WARNING)
        return

    root_logger.setLevel(logging.DEBUG)
    console_handler.setLevel(logging.DEBUG)

    # Create file handler for debug log with append mode
    log_path = os.path.abspath(log_file)
    file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # httpx logs every request line at INFO, including query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_path}")
