"""
Append-only writer for trace files.
"""

import json
import logging
from pathlib import Path
from typing import Union

from cardwar.trace.records import TraceMeta, TraceEventRecord, TraceRecord, TraceSnapshotRecord
from cardwar.war.transitions import RoundResult

logger = logging.getLogger(__name__)


def record_to_line(record: TraceRecord) -> str:
    """Serialize a record as one line of JSON (suit symbols kept verbatim)."""
    return json.dumps(record.to_dict(), ensure_ascii=False) + "\n"


class TraceWriter:
    """
    Streams a game to a line-delimited JSON trace file.

    The meta record is written as soon as the writer is created, replacing any
    existing file at that path; afterwards each call to `record_round` appends
    that round's events (and a snapshot, when enabled). Lines are appended
    immediately, so a trace of an interrupted game is still readable up to the
    last completed round.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        meta: TraceMeta,
        include_snapshots: bool = False,
        include_top_cards: bool = False,
    ):
        self.file_path = Path(file_path)
        self.meta = meta
        self.include_snapshots = include_snapshots
        self.include_top_cards = include_top_cards
        self.rounds_recorded = 0

        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        with self.file_path.open("w", encoding="utf-8") as trace_file:
            trace_file.write(record_to_line(meta))
        logger.info("Writing trace for seed %r to %s", meta.seed, self.file_path)

    def _append(self, text: str) -> None:
        with self.file_path.open("a", encoding="utf-8") as trace_file:
            trace_file.write(text)

    def record_round(self, result: RoundResult) -> None:
        """Append the events (and optional snapshot) of one round."""
        round_number = result.round_number
        lines = [
            record_to_line(TraceEventRecord(round=round_number, event=event))
            for event in result.events
        ]
        if self.include_snapshots:
            snapshot = TraceSnapshotRecord.from_state(
                round_number, result.state, include_top_cards=self.include_top_cards
            )
            lines.append(record_to_line(snapshot))
        if lines:
            self._append("".join(lines))
        self.rounds_recorded += 1
