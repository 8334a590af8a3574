"""
Infrastructure Layer

Reusable services that support the loader without owning transactions:

- sql: identifier validation and INSERT statement builders
- schema: column plan resolution for record batches
"""

__all__: list[str] = []
