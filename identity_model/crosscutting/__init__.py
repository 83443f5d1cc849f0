"""Crosscutting: config, logging, métricas y excepciones tipadas."""
