"""Focusly Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - stats/: Streak calculation
  - tasks/: Categorization, hierarchy, recurrence, overdue sweep, updates
  - test_models.py, test_config_models.py, test_cli.py: shared modules

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/tasks/
"""
