# Copyright 2026-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .client import RemoteFieldCost


@dataclass(frozen=True)
class CostComparison:
    """The estimated and the remotely-charged cost of one query."""

    name: str
    estimated: int
    actual: int
    fields: Sequence[RemoteFieldCost] = ()

    @property
    def difference(self) -> int:
        """Return how much the estimate exceeds the actual cost. Negative if it falls short."""
        return self.estimated - self.actual

    @property
    def percent_difference(self) -> float:
        """Return the difference as a percentage of the actual cost, rounded to one decimal."""
        if self.actual <= 0:
            return 0.0
        return round(self.difference / self.actual * 100, 1)


@dataclass(frozen=True)
class ComparisonError:
    """A query that could not be compared, and why."""

    name: str
    error: str


@dataclass
class CostComparisonReport:
    """Accumulates cost comparisons over many queries."""

    results: List[CostComparison] = field(default_factory=list)
    errors: List[ComparisonError] = field(default_factory=list)

    def add_result(
        self, name: str, estimated: int, actual: int, fields: Sequence[RemoteFieldCost] = ()
    ) -> CostComparison:
        """Record the estimated and actual cost of a query."""
        comparison = CostComparison(name, estimated, actual, tuple(fields))
        self.results.append(comparison)
        return comparison

    def add_error(self, name: str, error: str) -> None:
        """Record a query that could not be compared."""
        self.errors.append(ComparisonError(name, error))

    @property
    def exact_match_count(self) -> int:
        """Return the number of queries whose estimate matched the actual cost exactly."""
        return sum(1 for result in self.results if result.difference == 0)

    @property
    def mean_absolute_percent_difference(self) -> Optional[float]:
        """Return the mean of the absolute percentage differences, or None with no results."""
        if not self.results:
            return None
        total = sum(abs(result.percent_difference) for result in self.results)
        return round(total / len(self.results), 1)

    def render_summary(self, total_query_count: Optional[int] = None) -> str:
        """Return a human-readable summary of all the comparisons and errors."""
        if total_query_count is None:
            total_query_count = len(self.results) + len(self.errors)

        lines = ["Query cost comparison"]
        for result in sorted(self.results, key=lambda result: abs(result.difference), reverse=True):
            lines.append(
                f"  {result.name}: estimated={result.estimated} actual={result.actual} "
                f"diff={result.difference:+d} ({result.percent_difference:+.1f}%)"
            )
        if self.errors:
            lines.append("Errors")
            for comparison_error in self.errors:
                lines.append(f"  {comparison_error.name}: {comparison_error.error}")

        lines.append(
            f"Compared {len(self.results)} of {total_query_count} queries, "
            f"{len(self.errors)} errors, {self.exact_match_count} exact matches."
        )
        mean_difference = self.mean_absolute_percent_difference
        if mean_difference is not None:
            lines.append(f"Mean absolute difference: {mean_difference:.1f}%")
        return "\n".join(lines)
