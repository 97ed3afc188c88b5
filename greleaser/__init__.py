"""Build, archive and publish a GitHub release in one command."""

__version__ = "0.1.0"
