"""
Personal-best engine.

Pure functions over a user's workout history; no I/O.
"""

from .history import compute_exercise_history, exercise_detail
from .personal_best import compute_all_personal_bests, compute_personal_best

__all__ = [
    "compute_all_personal_bests",
    "compute_personal_best",
    "compute_exercise_history",
    "exercise_detail",
]
