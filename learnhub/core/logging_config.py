import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    # No-op when the root logger is already configured
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # pymongo is chatty below WARNING
    logging.getLogger("pymongo").setLevel(logging.WARNING)
