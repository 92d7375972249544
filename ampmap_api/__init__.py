"""
HTTP surface for the mapping engine.

Import concrete functionality from explicit submodules:
- `ampmap_api.endpoints` for the FastAPI router and exception handlers
- `ampmap_api.services` for request handling against the runtime context
- `ampmap_api.models` for request and response schemas
- `ampmap_api.exceptions` for HTTP error types
"""

__all__: list[str] = []
