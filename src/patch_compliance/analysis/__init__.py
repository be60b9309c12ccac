"""Compliance counting and fleet aggregation."""

from patch_compliance.analysis.aggregator import activity_cutoff, is_active, summarize_fleet
from patch_compliance.analysis.counter import build_compliance_row, count_update_states

__all__ = [
    "activity_cutoff",
    "build_compliance_row",
    "count_update_states",
    "is_active",
    "summarize_fleet",
]
