from __future__ import annotations
import os, re, logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional

from .branches import days_between, detect_main_branch, find_stale_branches, find_unmerged_branches
from .config import Config
from .records import AnalysisResult, AnnotationRecord, MarkerKind
from .report import sort_by_age, tally_markers
from .utils import AttributionError, GitHistory, git_commit_sha, iter_files, load_gitignore

logger = logging.getLogger(__name__)

# Marker, then optionally a ':' or '-' separator introducing the body.
MARKER_RE = re.compile(r"(TODO|FIXME|XXX|HACK)(?:\s*[:\-]\s*(.*))?", re.I)

CHECKS = ("branches", "prs", "todos")


def match_annotation(line: str):
    m = MARKER_RE.search(line)
    if not m:
        return None
    body = m.group(2)
    return MarkerKind(m.group(1).upper()), (body if body else line).rstrip()


def extract_annotations(repo_root: str, rel_path: str) -> Iterator[AnnotationRecord]:
    """Yield one unresolved record per marker line of a file, in line order."""
    with open(os.path.join(repo_root, rel_path), "r", encoding="utf-8", errors="ignore", newline="\n") as f:
        for line_no, raw in enumerate(f, 1):
            line = raw.rstrip("\r\n")
            hit = match_annotation(line)
            if hit is None:
                continue
            kind, body = hit
            yield AnnotationRecord(path=rel_path, line=line_no, kind=kind, body=body)


def resolve_age(record: AnnotationRecord, history, cutoff: datetime, now: datetime) -> AnnotationRecord:
    """Date a record through blame.

    Lines blame cannot attribute are assumed to predate the cutoff by a day, so
    untracked or uncommitted markers always show up in the report.
    """
    attributed = True
    try:
        introduced = history.line_timestamp(record.path, record.line)
    except AttributionError as e:
        logger.debug("No attribution, assuming old: %s", e)
        introduced = cutoff - timedelta(days=1)
        attributed = False
    return replace(
        record,
        introduced_at=introduced,
        age_days=days_between(introduced, now),
        attributed=attributed,
    )


def scan_todos(
    repo_root: str,
    cfg: Config,
    history,
    todo_days: int,
    now: Optional[datetime] = None,
) -> List[AnnotationRecord]:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=todo_days)
    ignore = load_gitignore(repo_root) if cfg.data.get("respect_gitignore") else None

    found: List[AnnotationRecord] = []
    files = iter_files(
        repo_root,
        cfg.data.get("exclude_dirs", []),
        cfg.data.get("exclude_extensions", []),
        ignore=ignore,
        excludes=cfg.data.get("exclude", []),
    )
    for rel in files:
        for candidate in extract_annotations(repo_root, rel):
            rec = resolve_age(candidate, history, cutoff, now)
            if rec.introduced_at < cutoff:
                found.append(rec)
    return found


def _run_check(name: str, fn, *args, **kwargs) -> AnalysisResult:
    result = AnalysisResult(name=name)
    try:
        fn(result, *args, **kwargs)
    except Exception as e:
        logger.error("Error analyzing %s: %s", name, e)
        result.error = str(e)
        result.items = []
    return result


def _stale(result: AnalysisResult, history, cfg: Config, stale_days: int, now: datetime):
    result.meta["threshold_days"] = stale_days
    result.items = sort_by_age(find_stale_branches(history, stale_days, now, cfg.remote_prefixes))


def _unmerged(result: AnalysisResult, history, cfg: Config, now: datetime):
    main = detect_main_branch(history, cfg.main_branches)
    result.meta["main_branch"] = main
    result.items = find_unmerged_branches(history, main, now)


def _todos(result: AnalysisResult, repo_root: str, history, cfg: Config, todo_days: int, now: datetime):
    result.meta["threshold_days"] = todo_days
    result.items = sort_by_age(scan_todos(repo_root, cfg, history, todo_days, now))
    result.meta["summary"] = tally_markers(result.items)


def scan_repo(
    repo_root: str,
    cfg: Config,
    checks=CHECKS,
    stale_days: Optional[int] = None,
    todo_days: Optional[int] = None,
    history=None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Run the selected analyses one after another; a failure only affects its own result."""
    stale_days = cfg.stale_days if stale_days is None else stale_days
    todo_days = cfg.todo_days if todo_days is None else todo_days
    history = history or GitHistory(repo_root, timeout=cfg.git_timeout)
    now = now or datetime.now(timezone.utc)

    analyses: Dict[str, AnalysisResult] = {}
    if "branches" in checks:
        analyses["branches"] = _run_check("branches", _stale, history, cfg, stale_days, now)
    if "prs" in checks:
        analyses["prs"] = _run_check("prs", _unmerged, history, cfg, now)
    if "todos" in checks:
        analyses["todos"] = _run_check("todos", _todos, repo_root, history, cfg, todo_days, now)

    return {
        "repo_root": repo_root,
        "commit_sha": git_commit_sha(repo_root),
        "generated_at": now,
        "thresholds": {"stale_days": stale_days, "todo_days": todo_days},
        "analyses": analyses,
    }
