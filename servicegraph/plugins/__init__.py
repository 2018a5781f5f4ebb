"""
플러그인 시스템 모듈

서비스 생성 전후에 실행되는 플러그인 파이프라인을 제공합니다.
"""

from servicegraph.plugins.base import AbstractPlugin, AggregatePlugin, load_plugin
from servicegraph.plugins.builtin import AutoConfigure, DependencyInjection
from servicegraph.plugins.decorators import get_declared_plugins, injector, plugin
from servicegraph.plugins.manager import PluginEntry, PluginManager

__all__ = [
    'AbstractPlugin',
    'AggregatePlugin',
    'AutoConfigure',
    'DependencyInjection',
    'PluginEntry',
    'PluginManager',
    'get_declared_plugins',
    'injector',
    'load_plugin',
    'plugin',
]
