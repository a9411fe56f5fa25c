"""
Logging configuration for the command line
"""

import logging
from pathlib import Path


def setup_logging(level: int = logging.WARNING, log_file: Path | None = None):
    """Console logging at `level`, optional file log at DEBUG; HTTP library quieted"""
    logging.getLogger("curl_cffi").setLevel(logging.WARNING)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    qrz_logger = logging.getLogger("qrzxml")
    qrz_logger.setLevel(logging.DEBUG if log_file else level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    qrz_logger.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        qrz_logger.addHandler(file_handler)
