"""Telegram delivery."""
