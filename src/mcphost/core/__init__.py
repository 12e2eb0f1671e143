"""Core infrastructure shared by the registry, dispatcher, and CLI."""
