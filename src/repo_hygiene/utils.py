from __future__ import annotations
import os, subprocess, json, logging
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple
from pathspec import PathSpec

logger = logging.getLogger(__name__)

BRANCH_FORMAT = "--format=%(refname:short)%09%(committerdate:iso8601)%09%(authorname)"

BranchRow = Tuple[str, str, str]

# blame reports uncommitted lines against this id
NULL_SHA = "0" * 40


class NotARepositoryError(Exception):
    pass


class GitError(RuntimeError):
    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        self.git_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"git {' '.join(self.git_args)} exited with {returncode}"
        if stderr:
            msg += f": {stderr}"
        super().__init__(msg)


class AttributionError(LookupError):
    """No blame information exists for a (path, line) pair."""


def validate_repo(path: str) -> str:
    root = os.path.abspath(path)
    if not os.path.exists(os.path.join(root, ".git")):
        raise NotARepositoryError(f"not a git repository: {path}")
    return root


def load_gitignore(repo_root: str) -> PathSpec:
    path = os.path.join(repo_root, ".gitignore")
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            return PathSpec.from_lines("gitwildmatch", f)
    return PathSpec.from_lines("gitwildmatch", [])


def _raise(err: OSError):
    raise err


def iter_files(
    repo_root: str,
    exclude_dirs: Iterable[str],
    exclude_extensions: Iterable[str],
    ignore: Optional[PathSpec] = None,
    excludes: Optional[List[str]] = None,
) -> Iterator[str]:
    """Yield every regular file under repo_root as a '/'-separated relative path.

    Directories named in exclude_dirs are pruned wherever they occur, files are
    dropped by lower-cased extension, and the optional gitwildmatch specs filter
    what is left. Any traversal error aborts the walk.
    """
    skip_dirs = set(exclude_dirs)
    skip_ext = {e.lower() for e in exclude_extensions}
    exclude_spec = PathSpec.from_lines("gitwildmatch", excludes or [])
    for root, dirs, files in os.walk(repo_root, onerror=_raise):
        dirs[:] = sorted(d for d in dirs if d not in skip_dirs)
        for name in sorted(files):
            if os.path.splitext(name)[1].lower() in skip_ext:
                continue
            full = os.path.join(root, name)
            # FIFOs, sockets and devices; dangling links still reach the reader
            if os.path.exists(full) and not os.path.isfile(full):
                continue
            rel = os.path.relpath(full, repo_root).replace(os.sep, "/")
            if exclude_spec.match_file(rel) or (ignore is not None and ignore.match_file(rel)):
                continue
            yield rel


def run(cmd: List[str], cwd: Optional[str] = None, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=timeout,
        check=False,
        text=True,
        errors="replace",
    )


def git(args: List[str], cwd: str, timeout: Optional[float] = None) -> str:
    res = run(["git", *args], cwd=cwd, timeout=timeout)
    if res.returncode != 0:
        raise GitError(args, res.returncode, res.stderr.strip())
    return res.stdout


def parse_branch_rows(output: str) -> List[BranchRow]:
    rows: List[BranchRow] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = line.split("\t")
        if len(parts) < 3:
            logger.debug("Skipping malformed branch row %r", line)
            continue
        rows.append((parts[0].strip(), parts[1].strip(), parts[2].strip()))
    return rows


class GitHistory:
    """Everything the analyses ask of git, always run with the repository as cwd."""

    def __init__(self, repo_root: str, timeout: Optional[float] = None):
        self.repo_root = repo_root
        self.timeout = timeout

    def _git(self, *args: str) -> str:
        return git(list(args), cwd=self.repo_root, timeout=self.timeout)

    def list_branches(self) -> List[BranchRow]:
        return parse_branch_rows(self._git("branch", "-a", BRANCH_FORMAT))

    def list_unmerged_remote(self, main_branch: str) -> List[BranchRow]:
        return parse_branch_rows(self._git("branch", "-r", "--no-merged", main_branch, BRANCH_FORMAT))

    def ref_exists(self, name: str) -> bool:
        res = run(
            ["git", "show-ref", "--verify", "--quiet", f"refs/heads/{name}"],
            cwd=self.repo_root,
            timeout=self.timeout,
        )
        return res.returncode == 0

    def line_timestamp(self, path: str, line: int) -> datetime:
        try:
            out = self._git("blame", "-L", f"{line},{line}", "--porcelain", "--", path)
        except GitError as e:
            raise AttributionError(f"{path}:{line}: {e}") from e
        if out.split(" ", 1)[0] == NULL_SHA:
            raise AttributionError(f"{path}:{line}: not committed yet")
        for ln in out.splitlines():
            if ln.startswith("committer-time "):
                value = ln[len("committer-time "):].strip()
                if not value.isdigit():
                    break
                return datetime.fromtimestamp(int(value), tz=timezone.utc)
        raise AttributionError(f"{path}:{line}: could not parse git blame output")


def git_commit_sha(repo_root: str) -> Optional[str]:
    try:
        res = run(["git", "rev-parse", "HEAD"], cwd=repo_root)
    except OSError as e:
        logger.debug("Could not read HEAD: %s", e)
        return None
    out = res.stdout.strip() if res.returncode == 0 else ""
    return out or None


def write_json(result: Any, repo_root: str) -> str:
    path = os.path.join(repo_root, "repo-hygiene.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, default=str)
    print(f"Wrote {path}")
    return path
