"""Slack delivery."""
