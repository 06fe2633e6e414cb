"""Relay HTTP service."""
