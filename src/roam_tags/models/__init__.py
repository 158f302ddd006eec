"""Data models for Roam Tags."""
