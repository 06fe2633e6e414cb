"""Relay domain modules."""
