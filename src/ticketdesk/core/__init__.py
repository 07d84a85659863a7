"""Core infrastructure: configuration, logging, errors, database and request plumbing."""
