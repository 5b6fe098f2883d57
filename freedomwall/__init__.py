"""Freedom Wall -- anonymous posting board with moderation and reactions."""

__version__ = "0.1.0"
