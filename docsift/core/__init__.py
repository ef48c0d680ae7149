"""Configuration, shared enums and logging."""
