"""Settings file and logging bootstrap."""
