"""Shared helpers: logging, file I/O, backups, diffs, paths and TOML text."""
