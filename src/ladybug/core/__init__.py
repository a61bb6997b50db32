"""Configuration, settings, logging and error types."""
