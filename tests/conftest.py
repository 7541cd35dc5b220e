from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from repo_hygiene.utils import AttributionError

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(days_ago: int) -> str:
    return (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%d %H:%M:%S %z")


class FakeHistory:
    """In-memory stand-in for GitHistory."""

    def __init__(
        self,
        branches: Optional[List[Tuple[str, str, str]]] = None,
        unmerged: Optional[Dict[str, List[Tuple[str, str, str]]]] = None,
        refs: Optional[List[str]] = None,
        blame: Optional[Dict[Tuple[str, int], datetime]] = None,
    ):
        self.branches = branches or []
        self.unmerged = unmerged or {}
        self.refs = set(refs or [])
        self.blame = blame or {}
        self.blame_calls: List[Tuple[str, int]] = []

    def list_branches(self):
        return list(self.branches)

    def list_unmerged_remote(self, main_branch: str):
        return list(self.unmerged.get(main_branch, []))

    def ref_exists(self, name: str) -> bool:
        return name in self.refs

    def line_timestamp(self, path: str, line: int) -> datetime:
        self.blame_calls.append((path, line))
        try:
            return self.blame[(path, line)]
        except KeyError:
            raise AttributionError(f"{path}:{line}: no such line") from None


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def write(tmp_path):
    def _write(rel: str, content: str = "") -> str:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return rel

    return _write
