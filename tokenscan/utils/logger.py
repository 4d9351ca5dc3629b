import os
import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def setup_logger(
    *,
    json_logs: bool = False,
    level: str = "INFO",
    log_dir: str | Path | None = "logs",
) -> None:
    """Configure loguru for scans and the API.

    The console goes to stderr so CLI output on stdout stays parseable;
    ``LOG_LEVEL`` in the environment wins over ``level``. With ``log_dir``
    set, a DEBUG file sink keeps per-attempt retry failures and skipped
    records for later review.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stderr, serialize=True, level=console_level)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    if log_dir is not None:
        logger.add(
            Path(log_dir) / "tokenscan_{time:YYYY-MM-DD}.log",
            rotation="20 MB",
            retention="7 days",
            level="DEBUG",
            serialize=json_logs,
        )
