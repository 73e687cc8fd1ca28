from pathlib import Path
import logging
import sys
from typing import Optional
from datetime import datetime

from core.config import get_config  # type: ignore


def setup_logging(logs_dir: Optional[str | Path] = None, log_file_name: Optional[str] = None) -> logging.Logger:
    """Configure root logging to stderr and a file under `logs_dir`.

    Idempotent: calling multiple times won't add duplicate handlers.
    stdout is reserved for the stdio transport, so console output goes to stderr.
    Level, directory and file name default to the `logging` section of config.yaml.
    """
    log_cfg = get_config().get("logging") or {}
    if logs_dir is None:
        logs_dir = log_cfg.get("dir") or Path(__file__).resolve().parent.parent / "logs"
    logs_dir = Path(logs_dir)
    if log_file_name is None:
        log_file_name = log_cfg.get("file_name", "linear_mcp.log")
    level = logging.getLevelName(str(log_cfg.get("level", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # formatter used by both handlers
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    # One file handler per process, whatever its timestamped name
    file_handler_exists = any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)

    if not file_handler_exists:
        # Add timestamp to the logfile name so each run writes to a timestamped file
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = Path(log_file_name).stem
        ext = Path(log_file_name).suffix or ".log"
        log_file = logs_dir / f"{base}_{timestamp}{ext}"
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            fh.setLevel(level)
            root_logger.addHandler(fh)
        except OSError:
            # If file handler cannot be created (permissions, etc), fall back to stderr only
            pass

    # Ensure a StreamHandler to stderr exists (don't duplicate)
    stream_stderr_exists = any(
        type(h) is logging.StreamHandler and getattr(h, "stream", None) is sys.stderr
        for h in root_logger.handlers
    )

    if not stream_stderr_exists:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(formatter)
        sh.setLevel(level)
        root_logger.addHandler(sh)

    return logging.getLogger(__name__)
