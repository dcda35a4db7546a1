"""overalls - merged Go test coverage for multi-package projects."""

__version__ = "0.1.0"
