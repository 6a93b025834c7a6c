"""
Vincent Test Suite
==================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/          → Tests for vincent.core (config, schema, results)
    ├── test_lifecycle/     → Tests for vincent.lifecycle (policy, tool, bindings)
    ├── test_orchestration/ → Tests for vincent.orchestration (evaluator, handlers)
    ├── test_integrations/  → Tests for vincent.integrations (sandboxes, resolver)
    ├── test_integration/   → End-to-end invocation scenarios
    └── conftest.py         → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_lifecycle/    # Run only lifecycle tests
    pytest -m integration           # Run only integration tests
"""
