"""Adapters — bindings to the external package manager."""

from wingetdeck.adapters.winget import CommandResult, WingetRunner

__all__ = [
    "CommandResult",
    "WingetRunner",
]
