"""Low-level Netatmo API endpoint wrappers."""
