"""Core configuration, database access and domain types."""
