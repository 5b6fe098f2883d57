"""Plain data types for posts, polls and banned words."""
