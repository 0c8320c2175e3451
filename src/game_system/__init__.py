"""
Game System - Simon memory game

The GameSession state machine, its timing primitives and ports, and the
GameManager frame loop that drives it from button input.
"""

from .signals import Signal, SoundPack
from .states import GameSessionState, SessionPhase
from .scheduler import FrameScheduler, TimerHandle
from .timeline import Timeline, TimelineStep
from .sequence_tracker import (
    MatchResult,
    RandomSignalSource,
    ScriptedSignalSource,
    SequenceTracker,
    SignalSource,
)
from .observable import StateStream
from .settings_store import JsonSettingsStore, MemorySettingsStore, PersistedSettings, SettingsStore
from .session import GameSession
from .game_manager import GameManager
from .config import AudioConfig, ButtonConfig, ButtonLayout, GameConfig, SessionTimings

__all__ = [
    # Domain
    "Signal",
    "SoundPack",
    "GameSessionState",
    "SessionPhase",
    # Timing
    "FrameScheduler",
    "TimerHandle",
    "Timeline",
    "TimelineStep",
    # Ports
    "MatchResult",
    "RandomSignalSource",
    "ScriptedSignalSource",
    "SequenceTracker",
    "SignalSource",
    "StateStream",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "PersistedSettings",
    "SettingsStore",
    # Core
    "GameSession",
    "GameManager",
    # Configuration
    "AudioConfig",
    "ButtonConfig",
    "ButtonLayout",
    "GameConfig",
    "SessionTimings"
]
