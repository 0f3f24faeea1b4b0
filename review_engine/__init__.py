"""
Review Engine: learning assessment and review scheduling.

Turns a learner's recall or spoken-pronunciation attempt into a quality
signal and uses it to decide when each item is next reviewed.

Packages:
- assessment: pronunciation evaluation, quality policy, tone drills
- delivery: SM-2 scheduler, review records, SQLite store, CLI
- study: mastery statistics and session planning
- core: derived mastery and difficulty classifications
"""

__version__ = "1.0.0"
