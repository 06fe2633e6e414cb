"""Devflow task mappings and progress relay."""
