"""Core Layer — post rules, domain types and error taxonomy.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Validators and pagination are pure: same input, same output, no IO
    - Protocols describe the record and asset stores; implementations live in
      infrastructure/

Design Decisions:
    - Pure rules separated from the adapters that persist and upload
      (ADR: impureim sandwich)
"""
