from __future__ import annotations
import os
from typing import Any, Dict
from jinja2 import Environment, FileSystemLoader, select_autoescape


def _env() -> Environment:
    tmpl_dir = os.path.join(os.path.dirname(__file__), "templates")
    return Environment(
        loader=FileSystemLoader(tmpl_dir),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_console(result: Dict[str, Any]) -> str:
    return _env().get_template("console.txt.j2").render(**result)


def render_markdown(result: Dict[str, Any], repo_root: str) -> str:
    md = _env().get_template("report.md.j2").render(**result)
    path = os.path.join(repo_root, "REPO_HYGIENE.md")
    with open(path, "w", encoding="utf-8") as f:
        f.write(md)
    print(f"Wrote {path}")
    return path
