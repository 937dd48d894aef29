"""
fbTimeCheck: A CLI tool for checking FreshBooks team time entries.

- Authenticates against the FreshBooks API (OAuth authorization code / refresh token)
- Fetches per-member time entries for a single day or a date range
- Exports to Excel and PDF (falls back to HTML)
- Can be used as a CLI (via `python -m fbtimecheck` or `fbtimecheck` if installed as a package)
"""

__version__ = "1.0.0"
