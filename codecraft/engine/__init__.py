"""Engine layer: translator, simulator, playback state machine, evaluator."""

from codecraft.engine.evaluator import OutcomeEvaluator, ProgressTracker, evaluate
from codecraft.engine.playback import PlaybackController
from codecraft.engine.scheduler import ManualScheduler, ThreadingScheduler
from codecraft.engine.simulator import WorldSimulator
from codecraft.engine.translator import ProgramTranslator, Translation, program_digest

__all__ = [
    "ManualScheduler",
    "OutcomeEvaluator",
    "PlaybackController",
    "ProgramTranslator",
    "ProgressTracker",
    "ThreadingScheduler",
    "Translation",
    "WorldSimulator",
    "evaluate",
    "program_digest",
]
