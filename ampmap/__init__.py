"""
ampmap - role-to-target model mappings for an external CLI agent.

Import concrete functionality from explicit submodules:
- `ampmap.mappings` for the alias codec, migration and mapping updater
- `ampmap.settings` for the YAML settings file and configuration health
- `ampmap.runtime` for bootstrap and the global runtime context
- `ampmap.logger` for instrumentation and activity logging
"""

__version__ = "0.1.0"

__all__: list[str] = []
