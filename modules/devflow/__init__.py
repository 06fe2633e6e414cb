"""Devflow chat commands."""
