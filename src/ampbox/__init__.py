"""ampbox - Run an Amplifier Claude Code session in an isolated Docker container."""

__version__ = "0.1.0"
