"""Load wizard settings from <config dir>/settings.yaml."""

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "GITWIZARD_CONFIG_DIR"

_DEFAULTS: dict[str, Any] = {
    "wizards": {
        # Entries are "<command key>:<picked via>", e.g. "stash-push:command".
        "skip_confirmations": ["stash-push:command"],
    },
    "worktrees": {
        # None means next to the repository: <repo>/../<repo>.worktrees
        "default_location": None,
    },
    "logging": {
        "file": "logs/gitwizard.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 5242880,  # 5 MB
        "backup_count": 2,
    },
}

_cached: dict[str, Any] | None = None


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overrides win section by section; a null in the YAML keeps the default."""
    merged = dict(defaults)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        elif value is not None:
            merged[key] = value
    return merged


def get_default_settings() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def get_config_dir() -> Path:
    """$GITWIZARD_CONFIG_DIR, else ~/.config/gitwizard."""
    value = os.environ.get(CONFIG_DIR_ENV)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".config" / "gitwizard"


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Value at a dotted key such as "logging.level", or `default` when any part is missing."""
    node: Any = settings
    for key in path.split("."):
        try:
            node = node[key]
        except (KeyError, TypeError):
            return default
    return node


def reload_settings() -> None:
    """Forget the loaded settings; the next load_settings() reads the file again."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Defaults deep-merged with settings.yaml. Cached until reload_settings()."""
    global _cached
    if _cached is not None:
        return _cached

    path = (config_dir or get_config_dir()) / "settings.yaml"
    result = get_default_settings()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                result = _merge(result, data)
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)

    _cached = result
    return result


def save_settings(settings: dict[str, Any], config_dir: Path | None = None) -> Path:
    """Atomically write settings.yaml and drop the cache."""
    path = (config_dir or get_config_dir()) / "settings.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(suffix=".yaml", prefix="settings_", dir=path.parent)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, allow_unicode=True)
        Path(tmp).replace(path)
    except Exception:
        Path(tmp).unlink(missing_ok=True)
        raise
    reload_settings()
    return path
