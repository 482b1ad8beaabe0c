"""Test helpers for building raw scraped records."""
