"""Utility modules for revstamp."""
