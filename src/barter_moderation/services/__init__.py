# src/barter_moderation/services/__init__.py
"""Business logic services for the moderation pipeline."""

from .escalation import EscalationWorker, SweepResult, run_escalation_sweep
from .moderation import ModerationService
from .notifier import ModeratorNotifier

__all__ = [
    "EscalationWorker",
    "ModerationService",
    "ModeratorNotifier",
    "SweepResult",
    "run_escalation_sweep",
]
