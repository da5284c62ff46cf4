"""Configuration management for feedwriter."""

import os
from dataclasses import dataclass

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class SerializerConfig:
    """Configuration for the markup serializer."""

    encoding: str = "utf-8"
    pretty_print: bool = True
    generator: str | None = "feedwriter"


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.log_level = os.getenv("FEEDWRITER_LOG_LEVEL", "INFO")
        self.encoding = os.getenv("FEEDWRITER_ENCODING", "utf-8")
        self.pretty_print = (
            os.getenv("FEEDWRITER_PRETTY_PRINT", "true").strip().lower() in _TRUE_VALUES
        )
        self.generator = os.getenv("FEEDWRITER_GENERATOR", "feedwriter")

    def get_serializer_config(self) -> SerializerConfig:
        """Get serializer configuration."""
        # An empty generator name switches the <generator> element off
        return SerializerConfig(
            encoding=self.encoding,
            pretty_print=self.pretty_print,
            generator=self.generator.strip() or None,
        )
