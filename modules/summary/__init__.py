"""AI event summaries."""
