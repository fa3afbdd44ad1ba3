import logging
import sys

def setup_logger(level=logging.INFO):
    """
    Sets up the `linkmeta` package logger at the given level.
    Logs go to stderr so stdout stays clean for the extracted record.
    """
    logger = logging.getLogger('linkmeta')
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)
    else:
        for existing in logger.handlers:
            existing.setLevel(level)

    return logger
