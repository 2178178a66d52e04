"""
cardwar: a deterministic, event-sourced engine for the card game War.
"""

ENGINE_VERSION = "0.1.0"

__version__ = ENGINE_VERSION
