# logging_setup.py
import logging
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "offensive_tweets"


def setup_logging(
    level: Union[str, int] = "INFO",
    log_dir: Optional[Path] = None,
    filename: str = "experiment.log",
) -> logging.Logger:
    """Console handler, plus a file handler under ``log_dir`` when given."""
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(lvl)
    # Avoid duplicate handlers on repeat runs
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", "%H:%M:%S")
    ch = logging.StreamHandler()
    ch.setLevel(lvl)
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / filename, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger
