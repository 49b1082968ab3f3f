"""Report-to-SQL compilation engine and legacy report importer."""

__version__ = "0.1.0"
