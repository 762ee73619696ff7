"""
geekfit: gamified exercise progress tracking.

Log reps of desk-friendly exercises to earn XP, level each exercise up to
99, keep a daily streak going and unlock achievements.
"""

__version__ = "0.1.0"
