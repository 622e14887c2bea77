"""
Static reference data.

Responsibilities:
- Load the genre catalog, question catalog, trait matrix and conflict rules
  from the bundled CSV seed files.
- Validate the tables and fail fast on malformed data.
- Expose the loaded catalog as a read-only, process-wide lookup.
"""
