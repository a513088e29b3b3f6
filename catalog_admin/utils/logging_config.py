"""
Logging setup for deployed instances

stdout carries everything at INFO, logs/app.log keeps the same stream on
disk, logs/error.log only errors, and logs/discounts.log every warning raised
while talking to the catalog backend or running a batch, which is where
products that failed inside a bulk discount end up.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from catalog_admin.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# logger name -> level, applied after the handlers are attached
LOGGER_LEVELS = {
    "catalog_admin": logging.DEBUG if settings.DEBUG else logging.INFO,
    "catalog_admin.services": logging.DEBUG if settings.DEBUG else logging.INFO,
    "uvicorn.access": logging.WARNING,
    "urllib3.connectionpool": logging.WARNING,
}


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(logs_dir: Path = Path("logs")) -> logging.Logger:
    logs_dir.mkdir(exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)

    root.addHandler(console)
    root.addHandler(_file_handler(logs_dir / "app.log", logging.INFO))
    root.addHandler(_file_handler(logs_dir / "error.log", logging.ERROR))

    # batch failures and backend rejections are logged at WARNING
    logging.getLogger("catalog_admin.services").addHandler(
        _file_handler(logs_dir / "discounts.log", logging.WARNING)
    )

    for name, level in LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    return root
