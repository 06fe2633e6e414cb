"""Settings, schemas, models and connection helpers shared by every service."""
