"""
Conveyor Test Suite
===================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/           → Tests for conveyor.core (config, models, exceptions)
    ├── test_infrastructure/ → Tests for conveyor.infrastructure (repositories)
    ├── test_integrations/   → Tests for conveyor.integrations (inventory clients)
    ├── test_caching/        → Tests for conveyor.caching (resource and inventory caches)
    ├── test_integration/    → End-to-end tests through the facade
    └── conftest.py          → Shared pytest fixtures

Running Tests:
    pytest                           # Run all tests
    pytest tests/test_caching/       # Run only cache tests
"""
