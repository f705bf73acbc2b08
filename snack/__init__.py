"""
Snack.

- backend/: API, services, repositories, models, configuration
- cli/: Operational commands (migrations, data maintenance)
"""
