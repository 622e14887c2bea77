"""
In-process analytics.

Responsibilities:
- Record quiz and places-search events.
- Aggregate them into session, genre and search statistics.
"""
