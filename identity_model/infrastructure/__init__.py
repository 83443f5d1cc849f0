"""Infraestructura: DB pool, repositorios (memory/postgres) y servicios."""
