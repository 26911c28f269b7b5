"""Casos de uso (access / users / affiliates)."""
