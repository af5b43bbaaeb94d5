"""Pull request bot that restores missing final line endings."""

__version__ = "0.1.0"
