"""Survey-driven llms.txt generator with pay-to-unlock downloads."""

__version__ = "1.0.0"
