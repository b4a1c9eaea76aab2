"""Analytics opt-out and anonymous user id, persisted as JSON."""
from __future__ import annotations

import json
import logging
import os
import uuid
from dataclasses import asdict, dataclass, field

logger = logging.getLogger(__name__)

DISABLE_ENV = "PDK_DISABLE_ANALYTICS"
CONFIG_ENV = "PDK_ANALYTICS_CONFIG"

_FALSEY = {"", "0", "false", "no", "off"}


@dataclass
class AnalyticsConfig:
    disabled: bool = False
    user_id: str = field(default_factory=lambda: str(uuid.uuid4()))


def get_config_path() -> str:
    """Path of the analytics config file, honouring PDK_ANALYTICS_CONFIG."""
    override = os.environ.get(CONFIG_ENV, "")
    if override:
        return os.path.abspath(os.path.expanduser(override))
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join("~", ".config")
    return os.path.abspath(os.path.expanduser(os.path.join(base, "pdk", "analytics.json")))


def load_config(config_path: str | None = None) -> AnalyticsConfig:
    """Load the analytics config, creating it on first use.

    Never raises. A malformed file yields defaults (a fresh user id, enabled)
    and is rewritten so the user id stays stable across runs.
    The PDK_DISABLE_ANALYTICS env var always wins over the file.
    """
    config_path = config_path or get_config_path()
    cfg = AnalyticsConfig()
    needs_save = True

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            cfg.disabled = bool(data.get("disabled", False))
            if data.get("user_id"):
                cfg.user_id = str(data["user_id"])
                needs_save = False
        except (OSError, ValueError, AttributeError) as e:
            logger.debug("Failed to read analytics config %s: %s", config_path, e)

    if needs_save:
        try:
            save_config(cfg, config_path)
        except OSError as e:
            logger.debug("Failed to write analytics config %s: %s", config_path, e)

    if os.environ.get(DISABLE_ENV, "").strip().lower() not in _FALSEY:
        cfg.disabled = True
    return cfg


def save_config(cfg: AnalyticsConfig, config_path: str | None = None) -> None:
    """Save the analytics config to file."""
    config_path = config_path or get_config_path()
    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(asdict(cfg), f, indent=2)
