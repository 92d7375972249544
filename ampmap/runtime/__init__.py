"""
Project runtime package.

Import concrete functionality from explicit submodules:
- `ampmap.runtime.config` for configuration dataclasses
- `ampmap.runtime.bootstrap` for startup helpers
- `ampmap.runtime.context` for runtime context definitions
- `ampmap.runtime.state` for global context accessors
- `ampmap.runtime.reload_service` for cache refresh after edits
"""

__all__: list[str] = []
