import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Installs the root handler for CLI runs.
    Library modules only ever call logging.getLogger(__name__).
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)

    # The google and openai clients are chatty at INFO.
    for noisy in ("urllib3", "httpx", "google.auth", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
