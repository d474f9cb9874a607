"""Reporters for relative coverage results."""

from __future__ import annotations

from covdelta.agents.reporters.terminal import CLIReporter, reporter

__all__ = ["CLIReporter", "reporter"]
