"""Adaptadores de persistencia."""
