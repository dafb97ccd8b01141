"""
Larder shopping-list pipeline.

The package turns queued recipes into a deduplicated, categorized shopping list and
contains the normalization, classification, unit conversion and aggregation steps
together with a reference SQLite persistence layer.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
