from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, List


class MarkerKind(str, Enum):
    TODO = "TODO"
    FIXME = "FIXME"
    XXX = "XXX"
    HACK = "HACK"


@dataclass(frozen=True)
class AnnotationRecord:
    path: str
    line: int
    kind: MarkerKind
    body: str
    introduced_at: Optional[datetime] = None
    age_days: Optional[int] = None
    attributed: bool = True  # False when blame had nothing and the age was assumed


@dataclass(frozen=True)
class BranchRecord:
    name: str
    last_commit_at: datetime
    author: str
    age_days: int
    is_remote: bool


@dataclass
class AnalysisResult:
    name: str  # branches|prs|todos
    items: List[Any] = field(default_factory=list)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None
