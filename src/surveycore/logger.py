import logging
import sys
from typing import Union

_initialized = False


def setup_logging(level: Union[int, str] = logging.INFO, name: str = 'surveycore') -> logging.Logger:
    """
    Initialize console logging once for an application embedding the core.

    Idempotent: subsequent calls return the same configured logger
    without re-attaching duplicate handlers.
    """
    global _initialized
    log = logging.getLogger(name)
    if _initialized and log.handlers:
        return log

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    log.setLevel(level)

    for handler in list(log.handlers):
        log.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    log.addHandler(console)

    _initialized = True
    return log
