"""Core infrastructure: configuration, logging, security, errors and the database handle."""
