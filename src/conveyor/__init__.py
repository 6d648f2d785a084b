"""
Conveyor - Promotion State Core for Continuous Delivery
=========================================================

Conveyor gives a continuous-delivery orchestrator its state:

    ArtifactRepository    which artifact versions exist, which version is
                          approved for each environment, and which versions
                          were actually deployed there
    MemoryInventoryCache  bounded, time-expiring caches in front of a slow
                          cloud-inventory service, with single-flight loads

Architecture Layers (top to bottom):
    1. Facade          - Conveyor (builds and owns everything below)
    2. Caching         - ResourceCache, MemoryInventoryCache
    3. Infrastructure  - ArtifactRepository (memory, sqlite)
    4. Integrations    - InventoryClient (abstract, mock)

Quick Start:
    >>> from conveyor import Conveyor
    >>> with Conveyor() as conveyor:
    ...     repo = conveyor.artifact_repository
"""

__version__ = "0.1.0"

from conveyor.facade import Conveyor

__all__ = ["Conveyor", "__version__"]
