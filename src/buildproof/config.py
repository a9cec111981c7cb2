"""buildproof configuration.

Loads config from:
  1. Defaults
  2. Global user config ($BUILDPROOF_HOME/config.json, default ~/.buildproof/config.json)
  3. Workspace override (<workspace>/.buildproof/config.json)
  4. Environment variables

Example workspace config:

    {
      "algorithm": "git-sha1",
      "sources": ["one.js", "two.js", "three.js"],
      "store": {"kind": "git", "path": "."},
      "output": "program.js"
    }
"""
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import UsageError
from .identity import ALGORITHMS
from .store import STORE_KINDS, ContentStore, open_store

logger = logging.getLogger(__name__)

CONFIG_DIR = ".buildproof"
CONFIG_FILE = "config.json"
DEFAULT_STORE_PATHS = {"directory": ".buildproof/objects", "git": "."}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG = {
    "algorithm": "sha256",
    "sources": [],
    "output": "program.js",
    "store": {
        "kind": "directory",
        # Relative to the workspace root. Unset: .buildproof/objects for
        # "directory", the workspace itself for "git".
        "path": None,
    },
    "workers": 1,
    # Require identical inclusion proofs, not just identical artifacts.
    "strict": True,
    "log_level": "WARNING",
}


def find_workspace_root(start_path: Path | None = None) -> Path:
    """Walk upward for a .buildproof/ or .git/ directory.

    BUILDPROOF_WORKSPACE_ROOT wins when set. Falls back to the start path.
    """
    env_root = os.environ.get("BUILDPROOF_WORKSPACE_ROOT")
    if env_root:
        return Path(env_root)

    start = Path(start_path or Path.cwd()).resolve()
    for parent in [start] + list(start.parents):
        if (parent / CONFIG_DIR).is_dir():
            return parent
        if (parent / ".git").exists():
            return parent
    return start


def load_config(workspace: Optional[Path] = None, config_path: Optional[Path] = None) -> dict:
    """Load layered config for ``workspace``.

    ``config_path`` replaces the global user layer. During pytest runs the
    real user config is never read unless passed explicitly.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    is_pytest = bool(os.environ.get("PYTEST_CURRENT_TEST"))
    home = Path(os.environ["BUILDPROOF_HOME"]) if os.environ.get("BUILDPROOF_HOME") else Path.home() / CONFIG_DIR
    global_path = config_path if config_path else home / CONFIG_FILE
    if is_pytest and config_path is None:
        global_path = None

    layers = [global_path]
    if workspace is not None:
        layers.append(Path(workspace) / CONFIG_DIR / CONFIG_FILE)

    for path in layers:
        if path is None or not path.exists():
            continue
        loaded = _read_json(path)
        if loaded:
            config = _merge(config, loaded)
            logger.debug("config loaded from %s", path)

    _apply_env_overrides(config)
    validate_config(config)
    return config


def _read_json(path: Path) -> dict:
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("could not read config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: top level is not an object", path)
        return {}
    return data


def _merge(base: dict, override: dict) -> dict:
    """Deep merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict) -> None:
    env = os.environ
    if env.get("BUILDPROOF_ALGORITHM"):
        config["algorithm"] = env["BUILDPROOF_ALGORITHM"]
    if env.get("BUILDPROOF_STORE"):
        config["store"]["kind"] = env["BUILDPROOF_STORE"]
    if env.get("BUILDPROOF_STORE_PATH"):
        config["store"]["path"] = env["BUILDPROOF_STORE_PATH"]
    if env.get("BUILDPROOF_OUTPUT"):
        config["output"] = env["BUILDPROOF_OUTPUT"]
    if env.get("BUILDPROOF_LOG_LEVEL"):
        config["log_level"] = env["BUILDPROOF_LOG_LEVEL"]
    if env.get("BUILDPROOF_WORKERS"):
        try:
            config["workers"] = int(env["BUILDPROOF_WORKERS"])
        except ValueError:
            raise UsageError(f"BUILDPROOF_WORKERS must be an integer, got {env['BUILDPROOF_WORKERS']!r}") from None


def validate_config(config: dict) -> None:
    if config["algorithm"] not in ALGORITHMS:
        raise UsageError(f"Unknown algorithm in config: {config['algorithm']!r}")
    if config["store"].get("kind") not in STORE_KINDS:
        raise UsageError(f"Unknown store kind in config: {config['store'].get('kind')!r}")
    if not isinstance(config["workers"], int) or config["workers"] < 1:
        raise UsageError(f"workers must be a positive integer, got {config['workers']!r}")
    if not isinstance(config["sources"], list):
        raise UsageError("sources must be a list of file names")
    if str(config["log_level"]).upper() not in LOG_LEVELS:
        raise UsageError(f"Unknown log level in config: {config['log_level']!r}")


def store_from_config(config: dict, workspace: Path) -> ContentStore:
    """Open the configured store; relative paths resolve against ``workspace``."""
    store_cfg = config["store"]
    path = store_cfg.get("path")
    if path is None:
        path = DEFAULT_STORE_PATHS.get(store_cfg["kind"])
    if path is not None and not Path(path).is_absolute():
        path = Path(workspace) / path
    return open_store(store_cfg["kind"], path)


__all__ = [
    "DEFAULT_CONFIG",
    "find_workspace_root",
    "load_config",
    "validate_config",
    "store_from_config",
]
