"""Ficdown interactive-fiction build orchestrator."""

__version__ = "0.1.0"
