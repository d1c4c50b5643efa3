"""todoapi - authenticated personal todo lists over a JSON REST API."""

__version__ = "1.0.0"
