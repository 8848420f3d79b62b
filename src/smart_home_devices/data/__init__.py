"""Data layer - canonical record and message schemas."""
