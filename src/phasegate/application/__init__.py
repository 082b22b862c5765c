"""
Application layer for the phase/handoff protocol.

Contains the orchestration service that coordinates domain objects.
"""

from phasegate.application.orchestrator import Orchestrator
from phasegate.application.session_event_emitter import SessionEventEmitter

__all__ = [
    "Orchestrator",
    "SessionEventEmitter",
]
