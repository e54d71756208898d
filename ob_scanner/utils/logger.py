import logging
import sys

def setup_logger(name="OBScanner", log_level=logging.INFO, log_file=None, child_levels=None):
    """
    Sets up the scanner logger with console and optional file handlers.

    Module loggers ("OBScanner.Detector", "OBScanner.Data", ...) propagate
    here. child_levels maps a child suffix or full logger name to a level,
    e.g. {"Detector": "INFO"} keeps the per-window detector trace out of a
    DEBUG run.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    for child, level in (child_levels or {}).items():
        child_name = child if child.startswith(name + ".") else f"{name}.{child}"
        logging.getLogger(child_name).setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
