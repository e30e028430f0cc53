"""Building blocks for change-data-capture pipelines: schemas, SQL builders, change filters, logging."""

__version__ = "0.1.0"