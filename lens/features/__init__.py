"""Feature packages supporting the ranking core."""
