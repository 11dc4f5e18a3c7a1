"""Build, test and release orchestration for the sky workspace."""

__version__ = "0.1.0"
