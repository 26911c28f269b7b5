"""Crosscutting: config, logging, excepciones y respuestas de error."""
