"""
Logging configuration for the collector
"""

import logging
from pathlib import Path


def setup_logging(log_file: Path | None = None, verbose: bool = False):
    """Setup logging with framework logs suppressed to WARNING"""
    # Suppress framework logs
    logging.getLogger("naver").setLevel(logging.WARNING)
    logging.getLogger("curl_cffi").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    collector_logger = logging.getLogger("collector")
    collector_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        collector_logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        collector_logger.addHandler(console_handler)
