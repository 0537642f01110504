"""
Per-file aggregation and plain-text rendering of check results.

PRESENTATION ONLY: rendering never changes an outcome.
"""

from __future__ import annotations

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from refcheck.app.schemas.check_result import CheckResult, OutcomeStatus

_LABELS = {
    OutcomeStatus.OK: "OK",
    OutcomeStatus.SKIPPED: "SKIP",
    OutcomeStatus.FAILED: "ERROR",
}


class FileReport(BaseModel):
    """
    Results of every reference found in one document.
    """

    path: str
    results: List[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for r in self.results if r.outcome.status == status)

    @property
    def failed(self) -> List[CheckResult]:
        return [r for r in self.results if r.outcome.is_failed]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def _render_line(result: CheckResult) -> str:
    label = _LABELS[result.outcome.status]
    line = f"  {label:<5} {result.reference}"
    if not result.outcome.is_ok:
        line += f"  ({result.outcome.describe()})"
    return line


def render_report(reports: Iterable[FileReport], verbose: bool = False) -> str:
    """
    Render reports as text.

    Broken references are always listed. Valid and skipped references are
    listed only in verbose mode. Results within a file are sorted by
    reference since they arrive in no particular order.
    """
    reports = list(reports)
    lines: List[str] = []

    for report in reports:
        shown = [
            r for r in sorted(report.results, key=lambda r: r.reference)
            if verbose or r.outcome.is_failed
        ]
        if not shown:
            continue
        lines.append(report.path)
        lines.extend(_render_line(r) for r in shown)

    total = sum(len(r.results) for r in reports)
    ok = sum(r.count(OutcomeStatus.OK) for r in reports)
    skipped = sum(r.count(OutcomeStatus.SKIPPED) for r in reports)
    failed = sum(r.count(OutcomeStatus.FAILED) for r in reports)

    lines.append(
        f"Checked {total} reference(s) in {len(reports)} file(s): "
        f"{ok} ok, {skipped} skipped, {failed} failed"
    )
    return "\n".join(lines)
