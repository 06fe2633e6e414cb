"""Discord delivery."""
