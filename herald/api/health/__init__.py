"""Health probe resources for liveness, readiness and detailed status.

Usage
-----
Import health resources for route registration::

    from herald.api.health.resources import HealthResource, ReadyResource
"""
