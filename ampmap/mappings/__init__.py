"""
Mapping engine package.

All helpers live in explicit submodules:
- `ampmap.mappings.models` for the mapping record and value types
- `ampmap.mappings.prefixes` for vendor prefix splitting
- `ampmap.mappings.codec` for the base(level) alias codec
- `ampmap.mappings.aggregation` for the uniform reasoning level
- `ampmap.mappings.migration` for key migration on load
- `ampmap.mappings.store` for the in-memory mapping table
- `ampmap.mappings.updater` for optimistic, rollback-safe updates
- `ampmap.mappings.catalog` for role slots and migration rules
"""

__all__: list[str] = []
