"""
서비스 컨텍스트 모듈

ContextBuilder가 만들어 내는 해결 단위 설명자(ServiceContext)를 정의합니다.
병합된 preference 데이터는 생성 후 변경되지 않으며, 플러그인은 팩토리,
전파 중단 플래그, 메타데이터만 변경할 수 있습니다.
"""

import inspect
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from servicegraph.config.schema import Lifecycle, PreferenceSpec
from servicegraph.contracts import PrototypeService, SharedService
from servicegraph.exceptions import ServiceNotFound
from servicegraph.interfaces import IServiceContext, PluginPhase
from servicegraph.reflection import identifier_of, load_callable, load_class


class ServiceContext(IServiceContext):
    """서비스 컨텍스트(설명자) 클래스"""

    def __init__(self,
                 container,
                 service_id: str,
                 preference: Mapping[str, Any],
                 dependency_stack: Sequence[str]):
        self._v_container = container
        self._v_service_id = service_id
        self._v_preference = MappingProxyType(dict(preference))
        self._v_spec = PreferenceSpec.model_validate(dict(preference))
        self._v_dependency_stack: Tuple[str, ...] = tuple(dependency_stack)
        self._v_service_class: Optional[type] = None
        self._v_factory: Optional[Callable[..., Any]] = None
        self._v_factory_loaded = False
        self._v_plugins: Optional[Dict[str, Any]] = None
        self._v_metadata: Dict[str, Any] = {}
        self._v_propagation_stopped = {
            PluginPhase.BEFORE: False,
            PluginPhase.AFTER: False,
        }

    @property
    def container(self):
        """이 컨텍스트를 만든 컨테이너"""
        return self._v_container

    @property
    def service_id(self) -> str:
        return self._v_service_id

    @property
    def shared_id(self) -> str:
        """레지스트리 캐시 키 (요청 식별자와 동일)"""
        return self._v_service_id

    @property
    def spec(self) -> PreferenceSpec:
        return self._v_spec

    @property
    def preference(self) -> Mapping[str, Any]:
        """병합된 preference 데이터 (읽기 전용)"""
        return self._v_preference

    @property
    def is_unresolved(self) -> bool:
        """설정에 없어 식별자를 클래스 이름으로 사용하는지 여부"""
        return self._v_spec.unresolved

    @property
    def class_name(self) -> str:
        """해결된 클래스 식별자"""
        if self._v_spec.service_class is None:
            return self._v_service_id
        return identifier_of(self._v_spec.service_class)

    @property
    def service_class(self) -> type:
        """해결된 클래스

        Raises:
            ServiceNotFound: 클래스를 로드할 수 없는 경우
        """
        if self._v_service_class is None:
            try:
                self._v_service_class = load_class(self._v_spec.service_class or self._v_service_id)
            except ServiceNotFound as e:
                raise ServiceNotFound(self._v_service_id, self.class_name) from e
        return self._v_service_class

    @property
    def dependency_stack(self) -> Tuple[str, ...]:
        """하위 해결에 사용되는 의존성 스택 (요청 식별자와 해결된 클래스 포함)"""
        return self._v_dependency_stack

    @property
    def arguments(self) -> Mapping[str, Any]:
        return MappingProxyType(self._v_spec.arguments)

    def has_argument(self, name: str) -> bool:
        return name in self._v_spec.arguments

    def get_argument(self, name: str) -> Any:
        return self._v_spec.arguments[name]

    @property
    def lifecycle(self) -> Lifecycle:
        """생명주기 정책

        설정값이 우선이며, 없으면 클래스 계약(SharedService, PrototypeService)을 따릅니다.
        """
        _v_lifecycle = self._v_spec.resolve_lifecycle()
        if _v_lifecycle is not None:
            return _v_lifecycle
        if issubclass(self.service_class, PrototypeService):
            return Lifecycle.PROTOTYPE
        if issubclass(self.service_class, SharedService):
            return Lifecycle.SHARED
        return Lifecycle.TRANSIENT

    @property
    def shared(self) -> bool:
        return self.lifecycle in (Lifecycle.SHARED, Lifecycle.WEAK)

    @property
    def weak(self) -> bool:
        return self.lifecycle == Lifecycle.WEAK

    @property
    def has_configured_factory(self) -> bool:
        return self._v_spec.factory is not None

    @property
    def factory(self) -> Optional[Callable[..., Any]]:
        """인스턴스 생성 팩토리 (설정값 또는 플러그인이 지정한 값)"""
        if not self._v_factory_loaded:
            if self._v_factory is None and self._v_spec.factory is not None:
                self._v_factory = load_callable(self._v_spec.factory)
            self._v_factory_loaded = True
        return self._v_factory

    def set_factory(self, factory: Callable[..., Any]) -> 'ServiceContext':
        """팩토리 지정 (플러그인 before 훅에서 사용)"""
        if not callable(factory):
            raise TypeError(f"Factory must be callable, {type(factory).__name__} given")
        self._v_factory = factory
        self._v_factory_loaded = True
        return self

    @property
    def plugins(self) -> Dict[str, Any]:
        """클래스 선언 플러그인 + preference 플러그인 (뒤쪽이 우선)"""
        if self._v_plugins is None:
            from servicegraph.plugins.decorators import get_declared_plugins

            _v_plugins: Dict[str, Any] = {}
            for plugin_id, plugin_args in get_declared_plugins(self.service_class):
                _v_plugins[plugin_id] = plugin_args
            _v_plugins.update(self._v_spec.plugins)
            self._v_plugins = _v_plugins
        return self._v_plugins

    def is_plugin_disabled(self, plugin_id: str) -> bool:
        """preference에서 False로 비활성화된 플러그인인지 확인"""
        return self._v_spec.plugins.get(plugin_id, True) is False

    def stop_propagation(self, phase: PluginPhase) -> 'ServiceContext':
        """해당 단계의 남은 플러그인 실행 중단"""
        self._v_propagation_stopped[PluginPhase(phase)] = True
        return self

    def is_propagation_stopped(self, phase: PluginPhase) -> bool:
        return self._v_propagation_stopped.get(PluginPhase(phase), False)

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._v_metadata

    def get_method(self, name: str) -> Optional[Callable[..., Any]]:
        """해결된 클래스의 메서드 조회"""
        _v_method = getattr(self.service_class, name, None)
        if _v_method is None or not callable(_v_method):
            return None
        return _v_method

    def get_public_methods(self) -> List[Tuple[str, Callable[..., Any]]]:
        """해결된 클래스의 공개 메서드 목록"""
        return [
            (name, member)
            for name, member in inspect.getmembers(self.service_class, callable)
            if not name.startswith('_')
        ]

    def __str__(self) -> str:
        return f"ServiceContext(id={self._v_service_id}, class={self.class_name})"

    def __repr__(self) -> str:
        return self.__str__()
