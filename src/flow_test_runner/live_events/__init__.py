"""Live event exports."""

from .event_messages import (
    StdoutTestRecord,
    StepCompletedEvent,
    decode_live_event,
    decode_stdout_record,
)
from .event_source import (
    LIVE_EVENTS_FLAG,
    STATE_DIRECTORY_NAME,
    FileEventSource,
    LiveEventSource,
)
from .live_event_reader import read_live_events
from .stdout_fallback_parser import parse_stdout_results

__all__ = [
    "StepCompletedEvent",
    "StdoutTestRecord",
    "decode_live_event",
    "decode_stdout_record",
    "LIVE_EVENTS_FLAG",
    "STATE_DIRECTORY_NAME",
    "FileEventSource",
    "LiveEventSource",
    "read_live_events",
    "parse_stdout_results",
]
