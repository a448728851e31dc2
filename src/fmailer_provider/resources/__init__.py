"""Managed resource types."""
