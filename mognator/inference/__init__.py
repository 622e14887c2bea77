"""
Genre inference.

Responsibilities:
- Compute P(answer | genre, question) from the trait matrix and learned counts.
- Maintain a per-session log-probability distribution over genres.
- Report ranked genres and the confidence signals used to stop a quiz.
"""
