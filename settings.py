import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from utils import APP_NAME

log = logging.getLogger(__name__)

WINDOW_GEOMETRY = "window/geometry"
WINDOW_STATE = "window/state"
HEADER_STATE = "window/headerState"
DIFF_COMMAND = "diff/command"


def _settings_path() -> Path:
    config_dir = Path(user_config_dir(APP_NAME))
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "settings.json"


# ================== Settings ==================
class Settings:
    """JSON key-value store for window layout and the diff command. Values are strings."""
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else _settings_path()
        self.data = {}
        try:
            if self.path.exists():
                with self.path.open("r", encoding="utf-8") as f:
                    self.data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("ignoring unreadable settings %s: %s", self.path, e)
            self.data = {}

    def value(self, key: str, default: str = "") -> str:
        return self.data.get(key, default)

    def set_value(self, key: str, value: str):
        self.data[key] = value

    def contains(self, key: str) -> bool:
        return key in self.data

    @property
    def diff_command(self) -> str:
        return self.value(DIFF_COMMAND)

    @diff_command.setter
    def diff_command(self, command: str):
        self.set_value(DIFF_COMMAND, command)

    def save(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            tmp.replace(self.path)
        except OSError as e:
            log.warning("cannot save settings to %s: %s", self.path, e)
