"""Multi-channel notification dispatch."""
