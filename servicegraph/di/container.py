"""
서비스 컨테이너 모듈

이 모듈은 설정 트리를 기반으로 서비스 그래프를 해결하는 컨테이너를 구현합니다.

해결 순서:
1. 자기 자신 식별자 확인 (컨테이너 반환)
2. 설정 로드 확인
3. 컨텍스트(설명자) 생성
4. 순환 의존성 검사
5. 레지스트리 조회 (create()가 아닌 경우)
6. 생성: 파라미터 해결 -> before 훅 -> 인스턴스화 -> after 훅
7. 생명주기 정책에 따라 레지스트리 보관
"""

import inspect
from contextvars import ContextVar
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from servicegraph.config import nodes
from servicegraph.config.schema import ConfigTree, load_config
from servicegraph.di.context import ServiceContext
from servicegraph.di.context_builder import ContextBuilder, ContextCache
from servicegraph.di.lifetime import SharedIdLocks, get_policy
from servicegraph.di.registry import ServiceRegistry
from servicegraph.exceptions import (
    CircularDependency,
    ConfigurationNotLoaded,
    NotInstantiable,
    TypeMismatch,
    UnresolvableArgument,
)
from servicegraph.interfaces import IServiceContainer, IServiceContext
from servicegraph.plugins.manager import PluginManager
from servicegraph.reflection import (
    ParameterInfo,
    get_constructor_parameters,
    identifier_of,
    is_builtin_type,
    is_instantiable,
)
from servicegraph.utils.log_utils import TraceIdContext, get_logger

logger = get_logger(__name__)

# 인자 값이 결정되지 않았음을 나타내는 표식
_MISSING = object()


def service_ref(service_id: Union[str, type]) -> Dict[str, str]:
    """설정 인자용 서비스 참조 생성

    Example:
        {"arguments": {"logger": service_ref("app.Logger")}}
    """
    return {nodes.ARGUMENT_KIND: nodes.ARGUMENT_KIND_SERVICE, nodes.ARGUMENT_ID: identifier_of(service_id)}


def is_service_ref(value: Any) -> bool:
    """서비스 참조 인자 여부 ('kind' 또는 'type' 키가 'service')"""
    if not isinstance(value, Mapping) or nodes.ARGUMENT_ID not in value:
        return False
    _v_kind = value.get(nodes.ARGUMENT_KIND, value.get(nodes.ARGUMENT_KIND_ALIAS))
    return _v_kind == nodes.ARGUMENT_KIND_SERVICE


class ServiceContainer(IServiceContainer):
    """서비스 컨테이너 클래스"""

    def __init__(self, config: Union[ConfigTree, Mapping[str, Any], None] = None):
        self._v_registry = ServiceRegistry()
        self._v_locks = SharedIdLocks()
        self._v_plugin_manager = PluginManager()
        self._v_config: Optional[ConfigTree] = None
        self._v_context_builder: Optional[ContextBuilder] = None
        # 호출 단위 의존성 스택 (스레드/태스크마다 독립)
        self._v_stack: ContextVar[Tuple[str, ...]] = ContextVar(
            f'servicegraph_dependency_stack_{id(self)}', default=()
        )

        if config is not None:
            self.set_config(config)

    def set_config(self, config: Union[ConfigTree, Mapping[str, Any]]) -> 'ServiceContainer':
        """설정 트리 로드

        Raises:
            ConfigurationError: 설정 트리 검증 실패
        """
        _v_config = load_config(config)
        _v_cache = None
        if _v_config.settings.cache.enabled:
            _v_cache = ContextCache(_v_config.settings.cache.size)

        self._v_config = _v_config
        self._v_context_builder = ContextBuilder(self, _v_config, _v_cache)
        self._v_plugin_manager.configure(_v_config.settings)
        logger.info(f"Configuration set (context cache {'enabled' if _v_cache else 'disabled'})")
        return self

    def get_config(self) -> Optional[ConfigTree]:
        return self._v_config

    @property
    def registry(self) -> ServiceRegistry:
        return self._v_registry

    @property
    def plugin_manager(self) -> PluginManager:
        return self._v_plugin_manager

    @property
    def context_builder(self) -> Optional[ContextBuilder]:
        return self._v_context_builder

    def get(self,
            service_id: Union[str, type],
            args: Optional[Dict[str, Any]] = None,
            dependency_stack: Optional[Sequence[str]] = None) -> Any:
        """서비스 조회 (레지스트리에 있으면 그대로 반환)"""
        with TraceIdContext():
            return self._require(service_id, args, dependency_stack, force=False)

    def create(self,
               service_id: Union[str, type],
               args: Optional[Dict[str, Any]] = None,
               dependency_stack: Optional[Sequence[str]] = None) -> Any:
        """서비스 생성 (항상 새 인스턴스, 생명주기에 따라 등록은 수행)"""
        with TraceIdContext():
            return self._require(service_id, args, dependency_stack, force=True)

    def has(self, service_id: Union[str, type]) -> bool:
        """레지스트리 등록 여부 확인"""
        return self._v_registry.has(identifier_of(service_id))

    def register(self,
                 service_id: Union[str, type],
                 instance: Any,
                 weak: bool = False) -> 'ServiceContainer':
        """인스턴스 직접 등록

        Raises:
            InvalidServiceInstance: 등록할 수 없는 인스턴스
        """
        self._v_registry.register(identifier_of(service_id), instance, weak=weak)
        return self

    def remove(self, service_id: Union[str, type]) -> bool:
        """레지스트리에서 제거"""
        _v_service_id = identifier_of(service_id)
        self._v_locks.discard(_v_service_id)
        return self._v_registry.remove(_v_service_id)

    def clear(self):
        """레지스트리와 컨텍스트 캐시 초기화"""
        self._v_registry.clear()
        self._v_locks.clear()
        if self._v_context_builder is not None and self._v_context_builder.cache is not None:
            self._v_context_builder.cache.clear()

    def get_dependency_stack(self) -> Tuple[str, ...]:
        """현재 호출의 의존성 스택"""
        return self._v_stack.get()

    def _self_identifiers(self) -> Tuple[str, ...]:
        return (
            identifier_of(ServiceContainer),
            identifier_of(IServiceContainer),
            identifier_of(type(self)),
        )

    def _require(self,
                 service_id: Union[str, type],
                 args: Optional[Dict[str, Any]],
                 dependency_stack: Optional[Sequence[str]],
                 force: bool) -> Any:
        """서비스 해결 내부 메서드"""
        _v_service_id = identifier_of(service_id)

        if _v_service_id in self._self_identifiers():
            return self

        if self._v_context_builder is None:
            raise ConfigurationNotLoaded(_v_service_id)

        _v_stack = tuple(dependency_stack) if dependency_stack is not None else self._v_stack.get()
        _v_context = self._v_context_builder.build(_v_service_id, _v_stack)

        # 순환 의존성 검사 (레지스트리 접근과 생성 전에 수행)
        if _v_service_id in _v_stack:
            _v_index = _v_stack.index(_v_service_id)
            raise CircularDependency(list(_v_stack[_v_index:]) + [_v_service_id])

        if not force:
            _v_instance = self._v_registry.get(_v_context.shared_id)
            if _v_instance is not None:
                return _v_instance

        _v_policy = get_policy(_v_context.lifecycle)
        if not _v_policy.cacheable:
            return self._create_service(_v_context, args)

        # 같은 식별자의 최초 생성은 하나의 스레드만 수행
        with self._v_locks.get_lock(_v_context.shared_id):
            if not force:
                _v_instance = self._v_registry.get(_v_context.shared_id)
                if _v_instance is not None:
                    return _v_instance
            _v_instance = self._create_service(_v_context, args)
            return _v_policy.store(self._v_registry, _v_context.shared_id, _v_instance)

    def _create_service(self, context: ServiceContext, args: Optional[Dict[str, Any]]) -> Any:
        """인스턴스 생성 내부 메서드"""
        _v_token = self._v_stack.set(context.dependency_stack)
        try:
            _v_class = context.service_class
            if not context.has_configured_factory and not is_instantiable(_v_class):
                raise NotInstantiable(context.service_id, context.class_name)

            _v_positional, _v_keywords = self.resolve_parameters(context, args or {})

            self._v_plugin_manager.before(context)

            _v_factory = context.factory or _v_class
            _v_service = _v_factory(*_v_positional, **_v_keywords)

            self._v_plugin_manager.after(_v_service, context)
        finally:
            self._v_stack.reset(_v_token)

        logger.debug(
            f"Created '{context.service_id}' as {context.class_name} ({context.lifecycle.value})"
        )
        return _v_service

    def resolve_parameters(self,
                           context: ServiceContext,
                           args: Mapping[str, Any]) -> Tuple[List[Any], Dict[str, Any]]:
        """생성자 파라미터 해결

        Returns:
            (위치 인자 목록, 키워드 인자 딕셔너리)
        """
        _v_positional: List[Any] = []
        _v_keywords: Dict[str, Any] = {}

        for _v_parameter in get_constructor_parameters(context.service_class):
            _v_value = self.resolve_parameter(context, _v_parameter, args)
            if _v_value is _MISSING:
                continue
            if _v_parameter.is_positional_only:
                _v_positional.append(_v_value)
            else:
                _v_keywords[_v_parameter.name] = _v_value

        return _v_positional, _v_keywords

    def resolve_parameter(self,
                          context: ServiceContext,
                          parameter: ParameterInfo,
                          args: Mapping[str, Any]) -> Any:
        """파라미터 하나의 값 결정

        우선순위: 호출 인자 > 설정 인자 > 기본값 > 가변 인자 생략 > 타입 자동 연결
        """
        if parameter.name in args:
            return args[parameter.name]

        if context.has_argument(parameter.name):
            return self.resolve_preference_argument(
                context, parameter, context.get_argument(parameter.name)
            )

        if parameter.has_default:
            return parameter.default

        if parameter.is_optional:
            return _MISSING

        _v_declared = parameter.declared_type
        if _v_declared is None:
            raise UnresolvableArgument(
                context.service_id, context.class_name, parameter.name, "no type declared"
            )

        if inspect.isclass(_v_declared) and issubclass(_v_declared, IServiceContext):
            return context

        if is_builtin_type(_v_declared):
            raise UnresolvableArgument(
                context.service_id, context.class_name, parameter.name,
                f"builtin type '{getattr(_v_declared, '__name__', _v_declared)}' cannot be autowired"
            )

        return self._require(identifier_of(_v_declared), None, None, force=False)

    def resolve_preference_argument(self,
                                    context: ServiceContext,
                                    parameter: ParameterInfo,
                                    value: Any) -> Any:
        """설정된 인자 값 해결 (서비스 참조면 컨테이너에서 조회)

        Raises:
            TypeMismatch: 참조된 서비스가 선언 타입의 인스턴스가 아닌 경우
        """
        if not is_service_ref(value):
            return value

        _v_service = self._require(value[nodes.ARGUMENT_ID], None, None, force=False)

        _v_declared = parameter.declared_type
        if inspect.isclass(_v_declared) and not is_builtin_type(_v_declared):
            if not isinstance(_v_service, _v_declared):
                raise TypeMismatch(
                    context.service_id,
                    parameter.name,
                    identifier_of(_v_declared),
                    identifier_of(type(_v_service)),
                )
        return _v_service

    def get_container_stats(self) -> Dict[str, Any]:
        """컨테이너 통계 조회"""
        _v_cache = self._v_context_builder.cache if self._v_context_builder is not None else None
        return {
            'configured': self._v_config is not None,
            'registered_services': len(self._v_registry),
            'registry_stats': self._v_registry.get_stats(),
            'global_plugins': len(self._v_plugin_manager.get_global_plugins()),
            'context_cache': _v_cache.get_stats() if _v_cache is not None else None,
        }

    def __str__(self) -> str:
        return f"ServiceContainer(services={len(self._v_registry)})"

    def __repr__(self) -> str:
        return self.__str__()
