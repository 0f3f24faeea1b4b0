"""
Study Module.

Provides services for:
- Mastery classification and collection statistics
- Time-boxed study session planning
"""

from review_engine.study.mastery_calculator import MasteryCalculator, ReviewStats
from review_engine.study.session_planner import (
    PlannerConfig,
    SessionPlanner,
    SessionType,
    StudySession,
)

__all__ = [
    "MasteryCalculator",
    "ReviewStats",
    "PlannerConfig",
    "SessionPlanner",
    "SessionType",
    "StudySession",
]
