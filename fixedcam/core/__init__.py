"""Shared infrastructure: logging, configuration files, paths."""
