"""earthwall command line helpers."""
