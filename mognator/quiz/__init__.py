"""
Quiz flow.

Responsibilities:
- Pick the next question (conflict exclusions, topic diversity, information score).
- Run a session: answer log, engine updates, undo, stop rule, results.
- Keep independent sessions apart in a registry keyed by session id.
"""
