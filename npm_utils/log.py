import logging
import os

LOGGER_NAME = "npm_utils"
LOG_LEVEL_VARIABLE = "NPM_UTILS_LOG_LEVEL"


def get_log_level(env: dict[str, str] | None = None) -> int:
    """Level named by NPM_UTILS_LOG_LEVEL, WARNING when unset or unknown."""
    if env is None:
        env = os.environ
    name = env.get(LOG_LEVEL_VARIABLE, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(level: int | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(get_log_level() if level is None else level)
    return logger
