"""Bundled template files and default configuration."""
