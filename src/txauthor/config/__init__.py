"""Configuration models."""

from txauthor.config.settings import AuthorConfig, LogConfig, LogLevel

__all__ = ["AuthorConfig", "LogConfig", "LogLevel"]
