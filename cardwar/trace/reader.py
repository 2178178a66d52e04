"""
Reader for trace files written by `TraceWriter`.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

from cardwar.trace.records import (
    TraceEventRecord,
    TraceFormatError,
    TraceMeta,
    TraceSnapshotRecord,
    parse_record,
)

logger = logging.getLogger(__name__)

MAX_PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class LoadedTrace:
    """
    A fully parsed trace file.

    Attributes:
        meta: The single meta record
        events: Event records in file order
        snapshots: Snapshot records in file order
    """

    meta: TraceMeta
    events: Tuple[TraceEventRecord, ...] = ()
    snapshots: Tuple[TraceSnapshotRecord, ...] = ()


def _parse_error(line: str) -> TraceFormatError:
    truncated = len(line) > MAX_PREVIEW_LENGTH
    preview = line[:MAX_PREVIEW_LENGTH] + "..." if truncated else line
    detail = f"length={len(line)}, truncated" if truncated else f"length={len(line)}"
    return TraceFormatError(f"Failed to parse trace line ({detail}): {preview}")


def parse_trace_line(line: str):
    """Decode one non-blank trace line into a record (None for unknown types)."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        raise _parse_error(line) from None
    if not isinstance(data, dict):
        raise _parse_error(line)
    try:
        return parse_record(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise TraceFormatError(
            f"Invalid {data.get('type')} record in trace: {exc}"
        ) from exc


def read_trace_file(path: Union[str, Path]) -> LoadedTrace:
    """
    Load and validate a trace file.

    Args:
        path: Location of the trace

    Returns:
        LoadedTrace with the meta record, events and snapshots

    Raises:
        FileNotFoundError: If the file does not exist
        TraceFormatError: If a line is not valid JSON, or the file does not
            contain exactly one meta record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Trace file not found at {path}")

    meta = None
    events: List[TraceEventRecord] = []
    snapshots: List[TraceSnapshotRecord] = []

    with path.open("r", encoding="utf-8") as trace_file:
        for raw_line in trace_file:
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue

            record = parse_trace_line(line)
            if isinstance(record, TraceMeta):
                if meta is not None:
                    raise TraceFormatError(
                        "Trace contains multiple meta records; expected one per file."
                    )
                meta = record
            elif isinstance(record, TraceEventRecord):
                events.append(record)
            elif isinstance(record, TraceSnapshotRecord):
                snapshots.append(record)

    if meta is None:
        raise TraceFormatError("Trace file is missing a meta record.")

    logger.debug("Read %d event(s) from %s", len(events), path)
    return LoadedTrace(meta=meta, events=tuple(events), snapshots=tuple(snapshots))
