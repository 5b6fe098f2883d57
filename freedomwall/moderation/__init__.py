"""Content sanitization, validation and moderation actions."""
