"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators

Event Naming Convention:
    <component>.<category>.<action>

    component: sample, path, collision, session, config, registry, error
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - sample.*: GPS fix filtering
    - path.*: Closure and self-intersection state changes
    - collision.*: Proximity warnings and violations
    - session.*: Tracking session lifecycle
    - error.*: Error conditions
    """

    # ========== Sample Events ==========
    SAMPLE_ACCEPTED = "sample.accepted"
    """GPS fix appended to the path."""

    SAMPLE_REJECTED = "sample.rejected"
    """GPS fix dropped (accuracy, speed, spacing or ordering)."""

    # ========== Path Events ==========
    PATH_CLOSED = "path.closed"
    """Path satisfies every closure condition."""

    PATH_SELF_INTERSECTION = "path.self_intersection"
    """Path crosses itself; closure blocked until it is un-crossed."""

    # ========== Collision Events ==========
    COLLISION_WARNING = "collision.warning"
    """Proximity tier above SAFE."""

    COLLISION_VIOLATION = "collision.violation"
    """Path entered, crossed or enclosed a territory."""

    # ========== Session Events ==========
    SESSION_STARTED = "session.started"
    SESSION_CANCELLED = "session.cancelled"
    SESSION_COMMITTED = "session.committed"

    # ========== Infrastructure Events ==========
    CONFIG_LOADED = "config.loaded"
    REGISTRY_UPDATED = "registry.updated"

    # ========== Error Events ==========
    INVALID_SAMPLE = "error.invalid_sample"
    """Raw fix could not be turned into a GeoSample."""

