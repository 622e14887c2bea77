"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build a prompt from the session's answers and the top-ranked genres.
- Ask the LLM for a one-sentence reason per genre.
- Graceful fallback to template reasons when the LLM is unavailable or
  returns invalid output.
"""
