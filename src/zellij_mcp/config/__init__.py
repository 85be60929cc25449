"""Packaged configuration resources."""
