"""Statistics derived from focus sessions.

Components:
    streaks.py: Consecutive active-day streaks in the user's timezone
"""
