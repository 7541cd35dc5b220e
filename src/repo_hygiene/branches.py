from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from .records import BranchRecord
from .utils import BranchRow

logger = logging.getLogger(__name__)

MAIN_BRANCH_CANDIDATES = ("main", "master", "develop")


class NoMainBranchError(RuntimeError):
    pass


def parse_commit_date(date_str: str) -> datetime:
    try:
        return datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        parsed = datetime.fromisoformat(date_str)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


def days_between(earlier: datetime, now: datetime) -> int:
    return int((now - earlier) // timedelta(days=1))


def _records(
    rows: Iterable[BranchRow],
    now: datetime,
    remote_prefixes: Sequence[str],
    force_remote: bool = False,
) -> Iterable[BranchRecord]:
    for name, date_str, author in rows:
        # origin/HEAD and friends are symbolic pointers, not branches
        if "HEAD" in name:
            continue
        try:
            last_commit = parse_commit_date(date_str)
        except ValueError:
            logger.debug("Skipping %s: unparseable commit date %r", name, date_str)
            continue
        yield BranchRecord(
            name=name,
            last_commit_at=last_commit,
            author=author,
            age_days=days_between(last_commit, now),
            is_remote=force_remote or any(name.startswith(p) for p in remote_prefixes),
        )


def find_stale_branches(
    history,
    stale_days: int,
    now: Optional[datetime] = None,
    remote_prefixes: Sequence[str] = ("origin/",),
) -> List[BranchRecord]:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=stale_days)
    return [
        rec
        for rec in _records(history.list_branches(), now, remote_prefixes)
        if rec.last_commit_at < cutoff
    ]


def detect_main_branch(history, candidates: Sequence[str] = MAIN_BRANCH_CANDIDATES) -> str:
    for name in candidates:
        if history.ref_exists(name):
            return name
    raise NoMainBranchError(f"no main branch found ({_or_list(candidates)})")


def find_unmerged_branches(history, main_branch: str, now: Optional[datetime] = None) -> List[BranchRecord]:
    now = now or datetime.now(timezone.utc)
    return list(_records(history.list_unmerged_remote(main_branch), now, (), force_remote=True))


def _or_list(names: Sequence[str]) -> str:
    names = list(names)
    if len(names) <= 1:
        return "".join(names)
    if len(names) == 2:
        return f"{names[0]} or {names[1]}"
    return ", ".join(names[:-1]) + f", or {names[-1]}"
