"""Generic outgoing webhook delivery."""
