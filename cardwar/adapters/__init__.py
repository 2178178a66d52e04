"""
Terminal adapters for the War engine.

This package turns round events into text and drives interactive sessions on
top of the pure engine.
"""

from cardwar.adapters.playback import (
    DEFAULT_PLAYBACK_DELAY_MS,
    compute_playback_delay_ms,
    has_war_event,
)
from cardwar.adapters.renderer import (
    Verbosity,
    format_card,
    format_table_card,
    render_help,
    render_intro,
    render_round_events,
    render_stats,
)
from cardwar.adapters.session import PlaySession, PromptAction, parse_action

__all__ = [
    "DEFAULT_PLAYBACK_DELAY_MS",
    "compute_playback_delay_ms",
    "has_war_event",
    "Verbosity",
    "format_card",
    "format_table_card",
    "render_help",
    "render_intro",
    "render_round_events",
    "render_stats",
    "PlaySession",
    "PromptAction",
    "parse_action",
]
