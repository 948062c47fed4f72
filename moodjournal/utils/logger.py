import logging
import os
import sys

# Constants
DEFAULT_LOG_DIR = "logs"
LOG_FILE_NAME = "app.log"
LOG_FORMAT = "[%(asctime)s] | %(levelname)-8s | %(name)-15s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = "moodjournal", level: int = logging.INFO) -> logging.Logger:
    """
    Configures and returns a standardized logger.

    Features:
    - Console Output (StreamHandler on stderr, stdout stays for reports)
    - File Output, overwritten on each run (LOG_DIR/app.log)
    - Standardized Formatting

    Args:
        name: Logger name. The package logger covers every module logger below it.
        level: Threshold for both handlers.

    Returns:
        Configured Logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if setup is called multiple times
    if logger.handlers:
        return logger

    log_dir = os.environ.get("LOG_DIR", DEFAULT_LOG_DIR)
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    log_path = os.path.join(log_dir, LOG_FILE_NAME)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # 1. Console Handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    # 2. File Handler, clean log of the current execution
    file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    logger.addHandler(file_handler)

    return logger
