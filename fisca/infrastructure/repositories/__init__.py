"""Repositorios in-memory y PostgreSQL."""
