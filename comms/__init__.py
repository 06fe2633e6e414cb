"""Outbound notification channels."""
