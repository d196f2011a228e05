"""
YAML configuration layers for the reading queue.

``config/defaults.yaml`` ships with the package; ``config/settings.yaml``, if
present, is laid over it key by key. ``Settings`` in config.py reads the
merged result for its field defaults, and READING_QUEUE_* environment
variables override everything.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "config"
DEFAULTS_FILE = "defaults.yaml"
OVERRIDES_FILE = "settings.yaml"

# (defaults path, overrides path) -> merged mapping
_loaded: Dict[Tuple[Path, Path], Dict[str, Any]] = {}


def get_project_root() -> Path:
    """Directory holding ``config/``: two levels above this package."""
    return Path(__file__).resolve().parents[2]


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Read one YAML layer.

    Absent files, empty files, non-mapping documents and syntax errors all
    give ``{}``; a broken override file should not stop the queue.
    """
    if not file_path.exists():
        return {}

    try:
        content = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring invalid YAML in {file_path}: {e}")
        return {}

    if not isinstance(content, dict):
        return {}
    return content


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Lay ``override`` over ``base``; nested mappings merge, anything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def expand_path(path: str) -> str:
    if not path:
        return path
    return os.path.expanduser(os.path.expandvars(path))


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Look up ``"section.key"`` style paths, e.g. ``"cache.ttl_ms"``."""
    node: Any = config
    for part in key_path.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def load_defaults(
    defaults_path: Optional[Path] = None,
    settings_path: Optional[Path] = None,
    reload: bool = False,
) -> Dict[str, Any]:
    """Merged defaults and overrides, read once per pair of paths.

    Args:
        defaults_path: Base layer (default: ``config/defaults.yaml``)
        settings_path: Override layer (default: ``config/settings.yaml``)
        reload: Re-read the files even if already loaded
    """
    config_dir = get_project_root() / CONFIG_DIR_NAME
    key = (
        defaults_path or config_dir / DEFAULTS_FILE,
        settings_path or config_dir / OVERRIDES_FILE,
    )

    if reload or key not in _loaded:
        base_layer, override_layer = (load_yaml_file(path) for path in key)
        _loaded[key] = deep_merge(base_layer, override_layer)
        logger.debug(f"Loaded configuration from {key[0]} (overrides: {key[1]})")

    return _loaded[key]


def get_config_value(key_path: str, default: Any = None, expand_paths: bool = False) -> Any:
    """Value at ``key_path`` in the project configuration.

    With ``expand_paths``, string values get ``~`` and ``$VARS`` expanded.
    """
    value = get_nested(load_defaults(), key_path, default)
    if expand_paths and isinstance(value, str):
        return expand_path(value)
    return value


def clear_cache() -> None:
    """Forget loaded layers so the next lookup re-reads the files."""
    _loaded.clear()
