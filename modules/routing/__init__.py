"""Recipient resolution and account linking."""
