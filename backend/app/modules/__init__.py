"""
Bounded-context modules.

Routers call the application services in `modules/*` (managers, lookups,
auditors); storage adapters live under `repositories/`.
"""
