"""Shopify to Notion catalog mirror and cross-system search."""

__version__ = "1.0.0"
