"""Logger shared by the editor modules.

Modules log through ``logger``; nothing is written anywhere until a host
calls :func:`configure_file_logging` (the standalone Tk app does).
"""
from __future__ import annotations

import logging
import os
from typing import Optional

LOGGER_NAME = 'MaskEditor'

logger = logging.getLogger(LOGGER_NAME)


def default_log_dir() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'logs')


def configure_file_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> str:
    """Append editor log lines to ``<log_dir>/mask_editor.log``.

    Returns the log file path. Calling it again does not add a second handler.
    """
    log_dir = log_dir or default_log_dir()
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'mask_editor.log')
    logger.setLevel(level)
    # Check if handler already exists to avoid duplicate logs
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and os.path.abspath(h.baseFilename) == os.path.abspath(log_file):
            return log_file
    fh = logging.FileHandler(log_file)
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    logger.addHandler(fh)
    logger.debug("File logging attached.")
    return log_file


__all__ = ['LOGGER_NAME', 'logger', 'configure_file_logging', 'default_log_dir']
