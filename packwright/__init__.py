"""Packwright command-line interface."""
