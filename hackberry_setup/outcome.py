from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class Outcome(str, Enum):
    SUCCESS = "success"
    SKIPPED_BY_FLAG = "skipped_by_flag"
    SKIPPED_OTHER = "skipped_other"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    name: str
    outcome: Outcome
    detail: str = ""
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"name": self.name, "outcome": self.outcome.value}
        if self.detail:
            d["detail"] = self.detail
        if self.warnings:
            d["warnings"] = list(self.warnings)
        return d


@dataclass
class RunRecorder:
    """Tally of one run, written only by the runner."""

    success: int = 0
    failed: int = 0
    skipped_by_flag: List[str] = field(default_factory=list)
    skipped_other: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    results: List[OperationResult] = field(default_factory=list)

    def record(self, result: OperationResult) -> None:
        self.results.append(result)
        if result.outcome is Outcome.SUCCESS:
            self.success += 1
        elif result.outcome is Outcome.FAILED:
            self.failed += 1
            self.failures.append(result.name)
        elif result.outcome is Outcome.SKIPPED_BY_FLAG:
            self.skipped_by_flag.append(result.name)
        else:
            self.skipped_other.append(result.name)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def warning_count(self) -> int:
        return sum(len(r.warnings) for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "failed": self.failed,
            "skipped_by_flag": list(self.skipped_by_flag),
            "skipped_other": list(self.skipped_other),
            "failures": list(self.failures),
            "results": [r.to_dict() for r in self.results],
        }
