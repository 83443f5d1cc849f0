"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus) de autorización y roles

Responsabilidades:
    - Definir métricas Prometheus en un registry propio del paquete.
    - Proveer funciones pequeñas y estables para registrar eventos.
    - Cuidar cardinalidad (NO user_id, NO role ids, NO nombres de roles).
    - Exponer el texto de exposición para quien monte un endpoint /metrics.

Colaboradores:
    - identity/access_subject.py: decisiones de autorización y resoluciones.
    - infrastructure/repositories/*: mutaciones de roles.
===============================================================================
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    generate_latest,
)

_registry = CollectorRegistry()

_authz_checks_total = Counter(
    "identity_authz_checks_total",
    "Evaluaciones de predicados de roles",
    ["predicate", "outcome"],
    registry=_registry,
)

_role_resolutions_total = Counter(
    "identity_role_resolutions_total",
    "Resoluciones de roles por origen (cache/store)",
    ["source"],
    registry=_registry,
)

_role_mutations_total = Counter(
    "identity_role_mutations_total",
    "Mutaciones de roles (attach/detach) por resultado",
    ["operation", "status"],
    registry=_registry,
)


def record_authz_check(predicate: str, outcome: str) -> None:
    """outcome: allow | deny | fail_closed."""
    _authz_checks_total.labels(predicate=predicate, outcome=outcome).inc()


def record_role_resolution(source: str) -> None:
    _role_resolutions_total.labels(source=source).inc()


def record_role_mutation(operation: str, status: str) -> None:
    _role_mutations_total.labels(operation=operation, status=status).inc()


def get_registry() -> CollectorRegistry:
    """Registry propio (tests / exposición)."""
    return _registry


def get_metrics_response() -> tuple[bytes, str]:
    """Retorna (body, content_type) listo para un endpoint /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
