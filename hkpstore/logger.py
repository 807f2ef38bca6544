import logging, json, sys, time, os

# JSON-line layout shared by every hkpstore.* logger
_FORMAT = json.dumps({
    "ts": "%(asctime)s",
    "level": "%(levelname)s",
    "name": "%(name)s",
    "msg": "%(message)s"
})


def _env_level(default=logging.INFO):
    name = os.getenv("HKPSTORE_LOG_LEVEL")
    if not name:
        return default
    return logging.getLevelName(name.upper()) if not name.isdigit() else int(name)


def get_logger(name="hkpstore", level=None, to_file=None):
    """
    Structured JSON-line logger for store, index, notify and transport events.

    ``level`` defaults to HKPSTORE_LOG_LEVEL (INFO when unset) and ``to_file``
    to HKPSTORE_LOG_FILE. Handlers are attached once per logger name.
    """
    logger = logging.getLogger(name)
    level = level if level is not None else _env_level()
    if isinstance(level, str):
        # unknown names fall back to INFO instead of "Level X" strings
        level = logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
        formatter.converter = time.gmtime  # UTC timestamps

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        to_file = to_file or os.getenv("HKPSTORE_LOG_FILE")
        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
