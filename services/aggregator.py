"""Temporal aggregation of classified readings."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from app.schemas import ClassifiedRow, Granularity, RowStatus
from services.timeframes import parse_local

logger = logging.getLogger(__name__)

BucketKey = Tuple[date, int]


class TemporalAggregator:
    """Pure aggregation component that can be unit tested in isolation.

    Rows are bucketed by local calendar date and by the index of the
    ``granularity``-wide slot since midnight. Invalid rows never contribute
    to a bucket's mean; a bucket left without contributing rows is omitted.
    A bucket is ``pending`` when any of its rows was pending.
    """

    def aggregate(
        self,
        rows: Sequence[ClassifiedRow],
        granularity: Union[Granularity, str],
    ) -> List[ClassifiedRow]:
        resolved = Granularity(granularity)
        if resolved is Granularity.one_minute:
            return list(rows)

        groups = self._group(rows, resolved.minutes)
        aggregated: List[ClassifiedRow] = []
        for key in sorted(groups):
            bucket = groups[key]
            contributing = [(row, value) for row, value in bucket if row.status is not RowStatus.invalid]
            if not contributing:
                continue

            mean = sum(value for _, value in contributing) / len(contributing)
            mean_text = f"{mean:.1f}"
            first_row = contributing[0][0]
            has_pending = any(row.status is RowStatus.pending for row, _ in bucket)
            aggregated.append(
                first_row.model_copy(
                    update={
                        "id": len(aggregated) + 1,
                        "raw_value": mean_text,
                        "final_value": mean_text,
                        "status": RowStatus.pending if has_pending else RowStatus.valid,
                        "raw_data_ids": _collect_ids(row for row, _ in bucket),
                    }
                )
            )
        return aggregated

    def _group(
        self, rows: Iterable[ClassifiedRow], interval_minutes: int
    ) -> Dict[BucketKey, List[Tuple[ClassifiedRow, float]]]:
        groups: Dict[BucketKey, List[Tuple[ClassifiedRow, float]]] = defaultdict(list)
        skipped = 0
        for row in rows:
            try:
                moment = parse_local(row.date_time)
                value = float(row.raw_value)
            except ValueError:
                skipped += 1
                continue
            minutes = moment.hour * 60 + moment.minute
            groups[(moment.date(), minutes // interval_minutes)].append((row, value))

        if skipped:
            logger.warning(
                "Skipped malformed rows during aggregation",
                extra={"skipped": skipped, "granularity": interval_minutes},
            )
        return groups


def _collect_ids(rows: Iterable[ClassifiedRow]) -> List[str]:
    ids: List[str] = []
    for row in rows:
        if row.raw_data_ids:
            ids.extend(row.raw_data_ids)
        elif row.raw_data_id:
            ids.append(row.raw_data_id)
    return ids
