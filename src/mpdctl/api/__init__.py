"""API layer: the MPD client facade."""
