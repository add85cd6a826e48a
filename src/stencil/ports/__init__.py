"""Port definitions."""
