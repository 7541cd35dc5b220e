import argparse
import logging
import sys
from .scanner import CHECKS, scan_repo
from .renderer import render_console, render_markdown
from .report import as_json
from .utils import NotARepositoryError, validate_repo, write_json
from .config import load_config

logger = logging.getLogger("repo_hygiene")

EXAMPLES = """\
examples:
  repo-hygiene --path /path/to/repo --stale-days 14
  repo-hygiene --no-branches --todos --todo-days 60
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-hygiene",
        description="Report stale branches, unmerged remote branches and old TODO/FIXME comments",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--path", default=".", help="Path to git repository (default: current directory)")
    parser.add_argument("--branches", action=argparse.BooleanOptionalAction, default=True, help="Check for stale branches")
    parser.add_argument("--prs", action=argparse.BooleanOptionalAction, default=True, help="Check for unmerged PR branches")
    parser.add_argument("--todos", action=argparse.BooleanOptionalAction, default=True, help="Check for old TODO/FIXME comments")
    parser.add_argument("--stale-days", type=int, default=None, help="Days to consider a branch stale (default: 30)")
    parser.add_argument("--todo-days", type=int, default=None, help="Days to consider TODO/FIXME comments old (default: 90)")
    parser.add_argument("--json", action="store_true", help="Emit repo-hygiene.json in the repository root")
    parser.add_argument("--markdown", action="store_true", help="Emit REPO_HYGIENE.md in the repository root")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def selected_checks(args: argparse.Namespace):
    checks = tuple(name for name in CHECKS if getattr(args, name))
    # Turning everything off means "run everything"
    return checks or CHECKS


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        repo_root = validate_repo(args.path)
    except NotARepositoryError as e:
        logger.error("Error: %s", e)
        return 1

    cfg = load_config(repo_root)
    result = scan_repo(
        repo_root,
        cfg,
        checks=selected_checks(args),
        stale_days=args.stale_days,
        todo_days=args.todo_days,
    )
    print(render_console(result), end="")

    if args.json:
        write_json(as_json(result), repo_root)

    if args.markdown:
        render_markdown(result, repo_root)
    return 0


if __name__ == "__main__":
    sys.exit(main())
