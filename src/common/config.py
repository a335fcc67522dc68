"""Load and validate relay configuration from config.yaml."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from src.progress.aggregator import validate_weights

logger = logging.getLogger("relay")

REPO_DIR = Path(__file__).resolve().parent.parent.parent
_DEFAULT_CONFIG_PATH = REPO_DIR / "config" / "config.yaml"

STRATEGIES = ("color_labels", "status_weights")

_DEFAULTS: dict[str, Any] = {
    "monday": {
        "api_url": "https://api.monday.com/v2",
        "api_token": None,
        "api_version": None,
        "timeout": 30,
    },
    "webhook_url": None,
    "progress": {
        "strategy": "color_labels",
        "weights": {},
    },
    "server": {
        "host": "0.0.0.0",
        "port": 8033,
    },
    "static_dir": "client",
    "log_dir": "logs",
    "log_level": "INFO",
}


def load_env_local(env_file: Path | None = None) -> None:
    """Load .env.local into os.environ without clobbering existing variables."""
    env_file = env_file or REPO_DIR / ".env.local"
    if not env_file.is_file():
        return
    for line in env_file.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip())


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file, with env-var overrides.

    A missing file is not an error: the built-in defaults apply and the
    environment supplies credentials.

    Environment variable overrides (if set):
        MONDAY_API_URL           -> monday.api_url
        MONDAY_API_KEY           -> monday.api_token
        MONDAY_API_VERSION       -> monday.api_version
        RELAY_WEBHOOK_URL        -> webhook_url
        RELAY_PROGRESS_STRATEGY  -> progress.strategy
        RELAY_LOG_DIR            -> log_dir
        PORT                     -> server.port
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
    raw: dict[str, Any] = {}
    if path.exists():
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    else:
        logger.info("Config file %s not found, using defaults", path)

    cfg = _merge(_DEFAULTS, raw)

    _env_override(cfg, "MONDAY_API_URL", "monday", "api_url")
    _env_override(cfg, "MONDAY_API_KEY", "monday", "api_token")
    _env_override(cfg, "MONDAY_API_VERSION", "monday", "api_version")
    _env_override(cfg, "RELAY_WEBHOOK_URL", "webhook_url")
    _env_override(cfg, "RELAY_PROGRESS_STRATEGY", "progress", "strategy")
    _env_override(cfg, "RELAY_LOG_DIR", "log_dir")
    _env_override(cfg, "PORT", "server", "port")
    cfg["server"]["port"] = int(cfg["server"]["port"])

    _validate(cfg)
    return cfg


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in, recursing into dicts."""
    out = copy.deepcopy(base)
    for key, val in override.items():
        if isinstance(val, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], val)
        else:
            out[key] = val
    return out


def _env_override(cfg: dict, env_key: str, *keys: str) -> None:
    """Override a nested config value from an environment variable."""
    val = os.environ.get(env_key)
    if val is None:
        return
    target = cfg
    for k in keys[:-1]:
        target = target.setdefault(k, {})
    target[keys[-1]] = val


def _validate(cfg: dict[str, Any]) -> None:
    """Reject unusable settings; warn about ones that only break a single endpoint."""
    strategy = cfg["progress"]["strategy"]
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown progress strategy: {strategy!r} (expected one of {', '.join(STRATEGIES)})")

    weights = cfg["progress"].get("weights") or {}
    if not isinstance(weights, dict):
        raise ValueError("progress.weights must be a mapping of status text to weight")
    cfg["progress"]["weights"] = validate_weights(weights)

    if not cfg["monday"].get("api_token"):
        logger.warning("No monday API token configured (set MONDAY_API_KEY); upstream calls will be rejected")

    if not cfg.get("webhook_url"):
        logger.warning("No webhook_url configured; /api/update-webhook will fail")


def setup_logging(cfg: dict[str, Any]) -> None:
    """Configure relay logging: stderr + rotating file."""
    log_dir = Path(cfg["log_dir"])
    if not log_dir.is_absolute():
        log_dir = REPO_DIR / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    from logging.handlers import RotatingFileHandler

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    root = logging.getLogger("relay")
    root.setLevel(getattr(logging, cfg.get("log_level", "INFO")))

    # stderr
    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    root.addHandler(sh)

    # rotating file
    fh = RotatingFileHandler(log_dir / "relay.log", maxBytes=5_000_000, backupCount=3)
    fh.setFormatter(fmt)
    root.addHandler(fh)
