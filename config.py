import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".recallprep"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_NEW_CARD_CAP = 20
DEFAULT_RETENTION_MINUTES = 120

def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)

def _as_bool(value: Any) -> bool:
    return str(value).lower() in ("1", "true", "yes", "on")

def load_config() -> Dict[str, Any]:
    """Load config from ~/.recallprep/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., SESSION_NEW_CARD_CAP env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    scheduler_cfg = config.get("scheduler", {})
    config["scheduler"] = {
        "fuzz": _as_bool(os.getenv("SCHEDULER_FUZZ", scheduler_cfg.get("fuzz", True))),
        "seed": _optional_int(os.getenv("SCHEDULER_SEED", scheduler_cfg.get("seed"))),
    }
    session_cfg = config.get("session", {})
    config["session"] = {
        "new_card_cap": _optional_int(
            os.getenv("SESSION_NEW_CARD_CAP", session_cfg.get("new_card_cap", DEFAULT_NEW_CARD_CAP))
        ),
        "review_cap": _optional_int(os.getenv("SESSION_REVIEW_CAP", session_cfg.get("review_cap"))),
        "requeue_lapsed": _as_bool(
            os.getenv("SESSION_REQUEUE_LAPSED", session_cfg.get("requeue_lapsed", False))
        ),
        "retention_minutes": int(os.getenv(
            "SESSION_RETENTION_MINUTES",
            session_cfg.get("retention_minutes", DEFAULT_RETENTION_MINUTES),
        )),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('session', 'new_card_cap')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
