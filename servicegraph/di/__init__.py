"""
의존성 해결 엔진 모듈

이 모듈은 설정 기반 의존성 해결 시스템의 핵심 구성 요소들을 제공합니다.
"""

from .container import ServiceContainer, is_service_ref, service_ref
from .context import ServiceContext
from .context_builder import ContextBuilder, ContextCache, deep_merge
from .factory import ServiceFactory
from .injector import DependencyInjector
from .lifetime import LifecyclePolicy, SharedIdLocks, get_policy
from .registry import RegistryEntry, ServiceRegistry

__all__ = [
    'ContextBuilder',
    'ContextCache',
    'DependencyInjector',
    'LifecyclePolicy',
    'RegistryEntry',
    'ServiceContainer',
    'ServiceContext',
    'ServiceFactory',
    'ServiceRegistry',
    'SharedIdLocks',
    'deep_merge',
    'get_policy',
    'is_service_ref',
    'service_ref',
]
