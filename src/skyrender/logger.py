"""Package logger for skyrender.

Messages go to stderr with the source location of each call. Rendering
reports one INFO line per call and DEBUG lines for culled components.
"""

import logging

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger("skyrender")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[skyrender] %(levelname)s %(asctime)s "
            "[%(module)s.%(funcName)s:%(lineno)d] %(message)s"
        )
    )
    logger.addHandler(handler)
logger.propagate = False


def set_level(level: str):
    """Set the package logger level from a name such as "DEBUG".

    Raises:
        ValueError: If the name is not one of LEVELS.
    """
    name = level.upper()
    if name not in LEVELS:
        raise ValueError(f"Unknown log level {level!r}")
    logger.setLevel(name)
