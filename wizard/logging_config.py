"""Logging setup for the CLI process."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config_dir: Path, settings: dict[str, Any], *, verbose: bool = False) -> Path:
    """Log to a rotating file under config_dir; mirror to stderr when verbose.

    Interactive prompts own the terminal, so console output is off unless
    asked for. Returns the log file path.
    """
    cfg = settings.get("logging", {})
    level = logging.DEBUG if verbose else getattr(logging, str(cfg.get("level", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    log_path = config_dir / cfg.get("file", "logs/gitwizard.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 2)),
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if verbose or cfg.get("log_to_console", False):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)
    return log_path
