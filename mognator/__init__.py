"""
Mognator: adaptive food-genre questionnaire and nearby venue ranking.
"""
