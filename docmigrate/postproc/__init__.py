"""Post-migration checks."""

from .links import LinkCollector, LinkValidator, collect_links

__all__ = ["LinkCollector", "LinkValidator", "collect_links"]
