"""Presence, meeting lifecycle and distraction telemetry for multi-party meetings."""

__version__ = "0.1.0"
