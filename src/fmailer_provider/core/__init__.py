"""Core functionality: configuration, logging and exceptions."""
