"""Storefront cart and checkout core."""
