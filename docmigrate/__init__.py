"""Docusaurus to Mintlify documentation migration."""

__version__ = "0.1.0"

__all__ = ["__version__"]
