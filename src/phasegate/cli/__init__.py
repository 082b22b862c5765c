"""Command-line interface for driving a filesystem-backed orchestrator."""

from phasegate.cli.main import cli

__all__ = ["cli"]
