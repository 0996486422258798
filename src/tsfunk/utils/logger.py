import logging
import datetime as dt
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(
    name: str = "tsfunk",
    log_dir: Optional[str | Path] = None,
    level: int = logging.WARNING,
    log_format: str = DEFAULT_FORMAT,
    daily_rotation: bool = True,
) -> logging.Logger:
    """
    Set the level of a logger and attach a file handler when a directory is given.

    :param name: Logger name (e.g., 'tsfunk')
    :param log_dir: Directory to store log files; no handler is added when None
    :param level: Logging level (default: logging.WARNING)
    :param log_format: Log message format string
    :param daily_rotation: If True, writes one log file per day (default: True)

    :return: The configured logger. The level is always applied; a handler is
        only added while the logger has none, so the first file wins.

    Example:
        >>> logger = setup_logger('tsfunk', 'data/logs', level=logging.INFO)
        >>> logger.info('3 rows with a single valid value')
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding duplicate handlers
    if logger.handlers or log_dir is None:
        return logger

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    if daily_rotation:
        log_date = dt.datetime.now().strftime('%Y-%m-%d')
        log_file = log_path / f"logs_{log_date}.log"
    else:
        log_file = log_path / f"{name.replace('.', '_')}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(file_handler)

    return logger
