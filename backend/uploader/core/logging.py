import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route application logs to stderr once per process."""
    root = logging.getLogger()
    if not any(getattr(h, "_uploader_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._uploader_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
    # botocore is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
