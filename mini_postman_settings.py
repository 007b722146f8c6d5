import os
import copy
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple
CONFIG_FILENAME = ".mini_postman_tui.json"
CONFIG_ENV = "MINI_POSTMAN_TUI_CONFIG"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
DEFAULT_SETTINGS = {
    "url_char_limit": 128,
    "body_placeholder": "{\n  \"foo\":\"bar\"\n}",
    "indent": "  ",
    "headers": [],
    "log_file": str(Path.home() / ".mini_postman_tui.log"),
    "log_level": "INFO",
}
def deep_merge(a: dict, b: dict) -> dict:
    out = copy.deepcopy(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out
def debug_enabled(environ=None) -> bool:
    return (environ if environ is not None else os.environ).get("DEBUG") == "1"
def config_path(environ=None) -> Path:
    env = environ if environ is not None else os.environ
    override = env.get(CONFIG_ENV)
    return Path(override).expanduser() if override else Path.home() / CONFIG_FILENAME
def load_settings(path: Optional[Path] = None) -> dict:
    path = path or config_path()
    if not path.exists():
        return copy.deepcopy(DEFAULT_SETTINGS)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return deep_merge(DEFAULT_SETTINGS, data)
    except (OSError, ValueError) as e:
        logging.warning(f"Failed to load settings from {path}; using defaults: {e}")
        return copy.deepcopy(DEFAULT_SETTINGS)
def initial_headers(settings: dict) -> List[Tuple[str, str]]:
    pairs = []
    for pair in settings.get("headers") or []:
        if isinstance(pair, (list, tuple)) and pair:
            pairs.append((str(pair[0]), str(pair[1]) if len(pair) > 1 else ""))
        elif isinstance(pair, dict):
            pairs.extend((str(k), str(v)) for k, v in pair.items())
    return pairs
def setup_logging(settings: dict, debug: bool = False):
    level = logging.DEBUG if debug else getattr(logging, str(settings.get("log_level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        filename=settings.get("log_file") or None,
        force=True,
    )
