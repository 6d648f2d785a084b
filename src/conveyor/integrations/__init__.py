"""
conveyor.integrations - External Service Integration Layer
============================================================

Adapters for the external services Conveyor depends on. Each integration is
abstracted behind an interface so implementations can be swapped.

Sub-packages:
    inventory/   - Cloud-inventory service clients (abstract + mock)
"""

__all__: list[str] = []
