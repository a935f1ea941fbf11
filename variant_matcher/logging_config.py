"""
Logging setup for `variant-matcher match` runs.

Package modules only create loggers with `logging.getLogger(__name__)`; the
CLI attaches two handlers to the root logger for each run:
- console: message only, WARNING and above (INFO with --verbose)
- file: every record with timestamp and logger name, rotated at 5MB, named
  after both inputs (e.g. match_sumstats_vs_info_snp_20240101_120000.log)
"""

import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from variant_matcher.config import Config

HANDLER_PREFIX = "variant_matcher"
CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3


def log_file_path(config: Config) -> Path:
    """Timestamped log file for the run under `<log_dir>/logs/`."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return config.log_dir / "logs" / f"{config.job_name}_{timestamp}.log"


def setup_logging(config: Config) -> Path:
    """Send log records to the console and to a rotating log file for the run.

    Handlers from a previous call are closed and replaced, so every run
    writes to its own file.

    Args:
        config: Run configuration; `log_dir`, `job_name` and `verbose` are used

    Returns:
        Path to the log file
    """
    log_file = log_file_path(config)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    reset_logging()
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter

    console_handler = logging.StreamHandler()
    console_handler.set_name(f"{HANDLER_PREFIX}.console")
    console_handler.setLevel(logging.INFO if config.verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
    file_handler.set_name(f"{HANDLER_PREFIX}.file")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    root_logger.addHandler(file_handler)

    logging.getLogger(__name__).debug(
        f"Matching '{config.query_file}' against '{config.reference_file}', log file {log_file}"
    )
    return log_file


def reset_logging() -> None:
    """Close and remove the handlers installed by `setup_logging`."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if (handler.get_name() or "").startswith(HANDLER_PREFIX):
            root_logger.removeHandler(handler)
            handler.close()
