"""Normalize and browse Claude Code transcripts."""

__version__ = "0.1.0"
