"""Storefront navigation bar with wallet session tracking."""

__version__ = "0.1.0"
