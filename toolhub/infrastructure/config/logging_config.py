import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``toolhub`` logger."""
    logger = logging.getLogger("toolhub")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_toolhub", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._toolhub = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
