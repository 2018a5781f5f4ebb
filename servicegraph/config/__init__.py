"""
Configuration package for servicegraph
"""

from servicegraph.config.schema import (
    ConfigTree,
    EngineSettings,
    Lifecycle,
    PreferenceSpec,
    ScopeConfig,
    load_config,
)

__all__ = [
    'ConfigTree',
    'EngineSettings',
    'Lifecycle',
    'PreferenceSpec',
    'ScopeConfig',
    'load_config',
]
