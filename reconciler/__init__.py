"""Sold Price Reconciler: merges Booli and Hemnet sold-listing snapshots."""

__version__ = "0.1.0"
