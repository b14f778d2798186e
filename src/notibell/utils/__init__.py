"""Utility subpackage providing helpers for configuration, logging and
concurrency management."""
