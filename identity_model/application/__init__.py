"""Application layer: casos de uso (orquestación, sin infraestructura)."""
