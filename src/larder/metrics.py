"""Prometheus metrics definitions for Larder."""

from __future__ import annotations

from prometheus_client import Counter

REGENERATIONS = Counter(
    "larder_shopping_regenerations_total",
    "Number of shopping list regenerations by status",
    ["status"],
)

ITEMS_GENERATED = Counter(
    "larder_shopping_items_generated_total",
    "Number of shopping list rows created by the generator",
    ["source"],
)

STORE_FAILURES = Counter(
    "larder_shopping_store_failures_total",
    "Number of failed shopping list store operations surfaced to the list state",
    ["operation"],
)

__all__ = [
    "REGENERATIONS",
    "ITEMS_GENERATED",
    "STORE_FAILURES",
]
