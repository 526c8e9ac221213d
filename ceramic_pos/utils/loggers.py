import logging

from ..config import LOG_LEVEL

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="ceramic_pos", level=None):
    """
    Logger with a console handler, configured on first call only.
    Level defaults to CERAMIC_POS_LOG_LEVEL (INFO when unset).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level if level is not None else LOG_LEVEL)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(ch)
    return logger
