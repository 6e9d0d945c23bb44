"""File system image builder, user utilities, shell parser and page-table model for a small teaching Unix."""

__version__ = "0.1.0"