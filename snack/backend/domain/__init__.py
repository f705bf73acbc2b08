"""
Domain Rules.

Pure functions for identifiers, usernames, pricing, and URLs.
No I/O and no database access; services call into these.
"""
