"""Game configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Immutable configuration for a game session."""

    # Playback timing (seconds)
    step_delay: float = 0.8               # Between commands in continuous mode
    settle_delay: float = 0.5             # After the last command, before judging
    first_step_delay: float = 0.1         # First command of a fresh single-step run
    course_complete_delay: float = 1.5    # Final level done -> course signal

    # Sandbox limits
    max_steps: int = 10_000               # Interpreter node evaluations per program
    max_commands: int = 500               # Emitted commands per program
    timeout_seconds: float = 1.0          # Wall clock per translation
    translation_cache_size: int = 64

    # Levels
    start_level_id: int = 1

    # Logging
    log_level: str = "INFO"
    replay_file: str = "replay.json"
