"""
servicegraph - 설정 기반 의존성 해결 및 객체 생명주기 엔진
"""

from servicegraph.config import ConfigTree, Lifecycle, load_config
from servicegraph.contracts import AutoConfigurable, Injectable, PrototypeService, SharedService
from servicegraph.di import ServiceContainer, ServiceContext, ServiceFactory, service_ref
from servicegraph.exceptions import (
    CircularDependency,
    ConfigurationError,
    ConfigurationNotLoaded,
    DIException,
    InvalidServiceInstance,
    NotInstantiable,
    PluginError,
    ServiceNotFound,
    TypeMismatch,
    UnresolvableArgument,
)
from servicegraph.interfaces import IPlugin, IServiceContainer, IServiceContext, PluginPhase
from servicegraph.plugins import AbstractPlugin, AggregatePlugin, AutoConfigure, DependencyInjection, injector, plugin

__version__ = '0.1.0'

__all__ = [
    'AbstractPlugin',
    'AggregatePlugin',
    'AutoConfigurable',
    'AutoConfigure',
    'CircularDependency',
    'ConfigTree',
    'ConfigurationError',
    'ConfigurationNotLoaded',
    'DIException',
    'DependencyInjection',
    'IPlugin',
    'IServiceContainer',
    'IServiceContext',
    'Injectable',
    'InvalidServiceInstance',
    'Lifecycle',
    'NotInstantiable',
    'PluginError',
    'PluginPhase',
    'PrototypeService',
    'ServiceContainer',
    'ServiceContext',
    'ServiceFactory',
    'ServiceNotFound',
    'SharedService',
    'TypeMismatch',
    'UnresolvableArgument',
    'injector',
    'load_config',
    'plugin',
    'service_ref',
]
