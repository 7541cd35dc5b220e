from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, TypeVar

from .records import MarkerKind

T = TypeVar("T")


def sort_by_age(records: Iterable[T]) -> List[T]:
    # sorted() is stable with reverse=True, so equal ages keep discovery order
    return sorted(records, key=lambda r: r.age_days, reverse=True)


def tally_markers(records: Iterable[Any]) -> Dict[str, int]:
    # XXX and HACK only show up in the total
    totals = {"total": 0, "todo": 0, "fixme": 0}
    for rec in records:
        totals["total"] += 1
        if rec.kind == MarkerKind.TODO:
            totals["todo"] += 1
        elif rec.kind == MarkerKind.FIXME:
            totals["fixme"] += 1
    return totals


def as_json(result: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(result)
    out["analyses"] = {name: asdict(res) for name, res in result["analyses"].items()}
    return out
