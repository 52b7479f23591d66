"""
All loggers hang off one ``retrieval_core`` parent that owns the stdout
handler, so a host application can silence or redirect the core in one place.
"""
import logging
import sys
from typing import Optional

from common.config import yaml_config
from common.settings import settings

ROOT_NAME = "retrieval_core"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(settings.log_level or yaml_config.logging.level)
        root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    root = _root_logger()
    return root.getChild(name) if name else root
