"""
Paths and the JSON config file shared by the timehunt commands.
"""

import json
import logging
import os
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

APP_DIR     = Path(os.environ.get("TIMEHUNT_HOME") or Path.home() / ".config/timehunt")
CONFIG_FILE = APP_DIR / "config.json"
TOKEN_FILE  = APP_DIR / "token.json"
SCOPES = ["https://www.googleapis.com/auth/calendar"]

CRED_CANDIDATES = [
    APP_DIR / "credentials.json",
    Path.cwd() / "credentials.json",
]


# ─── Config helpers ───────────────────────────────────────────────────────────

def find_credentials():
    for p in CRED_CANDIDATES:
        if p.exists():
            return p
    return None

def load_config() -> dict:
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            return json.load(f)
    return {}

def save_config(config: dict):
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


# ─── Timezone ─────────────────────────────────────────────────────────────────

def detect_timezone() -> str:
    lt = Path("/etc/localtime")
    if lt.is_symlink():
        target = str(lt.resolve())
        if "zoneinfo/" in target:
            return target.split("zoneinfo/", 1)[1]
    local_tz = datetime.now().astimezone().tzinfo
    if hasattr(local_tz, "key"):
        return local_tz.key
    return datetime.now().astimezone().strftime("%Z")

def resolve_timezone(config: dict) -> tzinfo:
    """The configured IANA zone, or the machine's local zone."""
    name = config.get("timezone")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r in %s, using local time", name, CONFIG_FILE)
    return datetime.now().astimezone().tzinfo
