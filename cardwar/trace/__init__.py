"""
Trace files: line-delimited JSON recordings of War games.

This package writes, reads, views, replays and verifies traces.
"""

from cardwar.trace.records import (
    TRACE_VERSION,
    TraceEventRecord,
    TraceFormatError,
    TraceMeta,
    TraceSnapshotRecord,
    TraceVerificationError,
    create_trace_meta,
)
from cardwar.trace.writer import TraceWriter
from cardwar.trace.reader import LoadedTrace, read_trace_file

__all__ = [
    "TRACE_VERSION",
    "TraceEventRecord",
    "TraceFormatError",
    "TraceMeta",
    "TraceSnapshotRecord",
    "TraceVerificationError",
    "create_trace_meta",
    "TraceWriter",
    "LoadedTrace",
    "read_trace_file",
]
