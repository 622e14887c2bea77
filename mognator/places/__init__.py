"""
Nearby venue search and ranking.

Responsibilities:
- Call the places-search proxy for a genre around a location.
- Degrade gracefully when the proxy or the user's location is unavailable.
- Rank returned venues by a weighted mix of rating, popularity, open status,
  distance and price fit.
"""
