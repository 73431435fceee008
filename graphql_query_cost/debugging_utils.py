# Copyright 2026-present Kensho Technologies, LLC.
from typing import List

from .typedefs import CostBreakdown, CostCategory


def _format_breakdown_line(breakdown: CostBreakdown) -> str:
    """Return a one-line summary of the cost of a single field."""
    if breakdown.parent_type_name is None:
        label = breakdown.response_key
    elif breakdown.response_key != breakdown.field_name:
        label = f"{breakdown.response_key}: {breakdown.parent_type_name}.{breakdown.field_name}"
    else:
        label = f"{breakdown.parent_type_name}.{breakdown.field_name}"

    details = [f"cost={breakdown.own_cost}", f"child_cost={breakdown.child_cost}"]
    if breakdown.category == CostCategory.CONNECTION:
        details.append(f"page_size={breakdown.page_size}")
        details.append(f"multiplier={breakdown.multiplier}")
    if breakdown.occurrence_count > 1:
        details.append(f"occurrences={breakdown.occurrence_count}")
    return "{} [{}] {}".format(label, breakdown.category.value, " ".join(details))


def pretty_print_cost_breakdown(breakdown: CostBreakdown, indent_size: int = 2) -> str:
    """Return a human-readable, indented representation of a cost breakdown tree."""
    output: List[str] = []

    def _append_lines(current: CostBreakdown, depth: int) -> None:
        output.append((" " * (indent_size * depth)) + _format_breakdown_line(current))
        for child in current.children:
            _append_lines(child, depth + 1)

    _append_lines(breakdown, 0)
    return "\n".join(output)
