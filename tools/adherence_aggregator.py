"""
Adherence Aggregator
Rolls classified occurrences up into adherence statistics
"""

import logging
from typing import Any, Dict, List, Sequence
from dataclasses import dataclass, asdict

from config import engine_config
from models import OccurrenceStatus
from tools.intake_matcher import StatusRecord
from tools.time_utils import isoformat_utc


logger = logging.getLogger(__name__)


GROUP_KEYS = ("medication_id", "schedule_id")


@dataclass(frozen=True)
class AdherenceSummary:
    """Counts over resolved occurrences; pending ones are left out"""
    expected: int = 0
    taken: int = 0
    skipped: int = 0
    missed: int = 0
    adherence_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def adherence_rate(taken: int, skipped: int, missed: int) -> float:
    """
    taken / (expected - skipped), rounded.

    Skips are deliberate patient decisions and are not counted against the
    patient. Returns exactly 0.0 when nothing is left in the denominator.
    """
    expected = taken + skipped + missed
    denominator = max(0, expected - skipped)
    if denominator == 0:
        return 0.0
    return round(taken / denominator, engine_config.RATE_PRECISION)


class AdherenceAggregator:
    """
    Summaries and per-medication / per-schedule breakdowns
    """

    def summarize(self, records: Sequence[StatusRecord]) -> AdherenceSummary:
        """Summarize classified occurrences"""
        taken = skipped = missed = 0
        for record in records:
            if record.status == OccurrenceStatus.TAKEN:
                taken += 1
            elif record.status == OccurrenceStatus.SKIPPED:
                skipped += 1
            elif record.status == OccurrenceStatus.MISSED:
                missed += 1

        return AdherenceSummary(
            expected=taken + skipped + missed,
            taken=taken,
            skipped=skipped,
            missed=missed,
            adherence_rate=adherence_rate(taken, skipped, missed)
        )

    def group_by(self, records: Sequence[StatusRecord], key: str) -> List[Dict[str, Any]]:
        """
        Summaries per group, in first-seen order.

        Medication groups are labelled with medication_name, schedule groups
        with their medication_id.
        """
        if key not in GROUP_KEYS:
            raise ValueError(f"Cannot group by {key!r}; expected one of {GROUP_KEYS}")

        groups: Dict[int, List[StatusRecord]] = {}
        for record in records:
            groups.setdefault(getattr(record, key), []).append(record)

        breakdown = []
        for group_id, items in groups.items():
            first = items[0]
            if key == "medication_id":
                label = {"medication_id": group_id, "medication_name": first.medication_name}
            else:
                label = {"schedule_id": group_id, "medication_id": first.medication_id}
            breakdown.append({**label, **self.summarize(items).to_dict()})

        logger.debug(f"Built {len(breakdown)} {key} groups from {len(records)} records")
        return breakdown

    def timeline(self, records: Sequence[StatusRecord]) -> List[Dict[str, Any]]:
        """Ordered status entries for display"""
        return [
            {
                "scheduled_at": isoformat_utc(record.scheduled_at),
                "status": record.status.value,
                "medication_id": record.medication_id,
                "schedule_id": record.schedule_id,
            }
            for record in records
        ]


# Singleton instance
adherence_aggregator = AdherenceAggregator()


def summarize(records: Sequence[StatusRecord]) -> AdherenceSummary:
    """Convenience function to summarize records"""
    return adherence_aggregator.summarize(records)
