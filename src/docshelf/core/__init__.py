"""Manifest resolution and content transformation."""
