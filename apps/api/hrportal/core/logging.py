import logging

from hrportal.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once at application start."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # passlib's bcrypt backend probe is noisy on recent bcrypt builds
    logging.getLogger("passlib").setLevel(logging.ERROR)
