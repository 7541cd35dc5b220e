from __future__ import annotations
import copy, logging, os, yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE = ".repohygiene.yml"

DEFAULT_CONFIG = {
    "thresholds": {
        "stale_days": 30,
        "todo_days": 90,
    },
    "main_branches": ["main", "master", "develop"],
    "remote_prefixes": ["origin/"],
    "exclude_dirs": [
        ".git", "node_modules", "vendor", ".vscode", ".idea",
        "build", "dist", "target", "bin", "obj",
    ],
    "exclude_extensions": [
        ".exe", ".dll", ".so", ".dylib", ".a", ".lib",
        ".jpg", ".jpeg", ".png", ".gif", ".ico", ".svg",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx",
        ".zip", ".tar", ".gz", ".7z", ".rar",
        ".mp3", ".mp4", ".avi", ".mov",
    ],
    # gitwildmatch patterns, relative to the repository root
    "exclude": [],
    "respect_gitignore": False,
    "git_timeout": None,
}


@dataclass
class Config:
    data: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))

    @property
    def stale_days(self) -> int:
        return int(self.data["thresholds"]["stale_days"])

    @property
    def todo_days(self) -> int:
        return int(self.data["thresholds"]["todo_days"])

    @property
    def main_branches(self) -> List[str]:
        return list(self.data.get("main_branches") or [])

    @property
    def remote_prefixes(self) -> List[str]:
        return list(self.data.get("remote_prefixes") or [])

    @property
    def git_timeout(self) -> Optional[float]:
        return self.data.get("git_timeout")


def load_config(repo_root: str) -> Config:
    path = os.path.join(repo_root, CONFIG_FILE)
    merged = copy.deepcopy(DEFAULT_CONFIG)
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            try:
                user = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                logger.warning("Ignoring malformed %s: %s", path, e)
                user = {}
        if not isinstance(user, dict):
            logger.warning("Ignoring %s: expected a mapping at top level", path)
            user = {}
        for k, v in user.items():
            if isinstance(v, dict) and isinstance(merged.get(k), dict):
                merged[k].update(v)
            else:
                merged[k] = v
        merged["thresholds"] = _checked_thresholds(merged.get("thresholds"), path)
    return Config(merged)


def _checked_thresholds(value: Any, path: str) -> Dict[str, int]:
    defaults = DEFAULT_CONFIG["thresholds"]
    if not isinstance(value, dict):
        logger.warning("Ignoring thresholds in %s: expected a mapping, got %r", path, value)
        return dict(defaults)
    checked = dict(value)
    for key, default in defaults.items():
        days = checked.get(key)
        # bool is an int subclass
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            logger.warning("Ignoring thresholds.%s in %s: expected a non-negative integer, got %r", key, path, days)
            checked[key] = default
    return checked
