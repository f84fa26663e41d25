"""
Test Tools Package
Tests for the adherence engine (expansion, matching, aggregation, overlap checks)
"""

__all__ = [
    "test_time_utils",
    "test_recurrence",
    "test_intake_matcher",
    "test_adherence_aggregator",
    "test_overlap_validator",
]
