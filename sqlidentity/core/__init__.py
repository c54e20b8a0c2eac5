"""Configuration, logging, database helpers and shared value types."""
