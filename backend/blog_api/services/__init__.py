"""Services Layer — orchestration of core rules over infrastructure adapters.

Invariants:
    - Services depend on core Protocols, never on concrete adapters
    - One service per resource lifecycle

Design Decisions:
    - Adapters injected by the API layer (ADR: impureim sandwich, pure core and
      imperative shell)
"""
