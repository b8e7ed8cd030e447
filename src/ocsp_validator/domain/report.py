"""
Validation report — the append-only diagnostic log of a validation.

Every component receives the caller's report and may only append to it.
The one controlled rewrite is `fold_responder_report`, which copies the
items of a responder sub-validation into the parent and downgrades INVALID
items to INDETERMINATE on the way in.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum

from ocsp_validator.domain.models import Certificate


class ReportItemStatus(IntEnum):
    """Severity of a report item, ordered INFO < INDETERMINATE < INVALID."""

    INFO = 0
    INDETERMINATE = 1
    INVALID = 2


class ValidationResult(Enum):
    VALID = "VALID"
    INDETERMINATE = "INDETERMINATE"
    INVALID = "INVALID"


@dataclass(frozen=True, slots=True)
class ReportItem:
    """A single diagnostic produced by a check on a certificate."""

    certificate: Certificate | None
    check_name: str
    message: str
    status: ReportItemStatus
    cause: BaseException | None = field(default=None, repr=False, compare=False)

    def with_status(self, status: ReportItemStatus) -> ReportItem:
        return replace(self, status=status)


class ValidationReport:
    """
    Ordered, append-only sequence of report items owned by the outermost caller.

    >>> report = ValidationReport()
    >>> report.validation_result
    <ValidationResult.VALID: 'VALID'>
    """

    def __init__(self) -> None:
        self._items: list[ReportItem] = []

    def add_report_item(self, item: ReportItem) -> ValidationReport:
        self._items.append(item)
        return self

    @property
    def logs(self) -> tuple[ReportItem, ...]:
        return tuple(self._items)

    @property
    def failures(self) -> tuple[ReportItem, ...]:
        return tuple(item for item in self._items if item.status > ReportItemStatus.INFO)

    @property
    def validation_result(self) -> ValidationResult:
        """INVALID if any item is INVALID, INDETERMINATE if any is INDETERMINATE, else VALID."""
        worst = max((item.status for item in self._items), default=ReportItemStatus.INFO)
        match worst:
            case ReportItemStatus.INVALID:
                return ValidationResult.INVALID
            case ReportItemStatus.INDETERMINATE:
                return ValidationResult.INDETERMINATE
            case _:
                return ValidationResult.VALID

    def __iter__(self) -> Iterator[ReportItem]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ValidationReport(result={self.validation_result.value}, items={len(self._items)})"


def fold_responder_report(report: ValidationReport, responder_report: ValidationReport) -> None:
    """Append every responder item to `report`, downgrading INVALID to INDETERMINATE."""
    for item in responder_report:
        if item.status == ReportItemStatus.INVALID:
            item = item.with_status(ReportItemStatus.INDETERMINATE)
        report.add_report_item(item)
