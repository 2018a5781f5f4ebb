"""
의존성 주입기 모듈

이 모듈은 함수 단위 의존성 주입과 전역 컨테이너 편의 기능을 제공합니다.
"""

import functools
import inspect
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

from servicegraph.di.container import ServiceContainer
from servicegraph.reflection import get_parameter_hints, identifier_of, is_builtin_type, unwrap_optional

T = TypeVar('T')


class DependencyInjector:
    """의존성 주입기 클래스"""

    def __init__(self, container: ServiceContainer):
        self._v_container = container

    @property
    def container(self) -> ServiceContainer:
        return self._v_container

    def inject(self, func: Callable[..., T]) -> Callable[..., T]:
        """함수에 의존성 주입 데코레이터

        호출 시 전달되지 않았고 기본값도 없는 파라미터 중
        서비스 타입이 선언된 것만 컨테이너에서 채웁니다.
        """
        _v_signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _v_bound_args = _v_signature.bind_partial(*args, **kwargs)

            _v_hints = get_parameter_hints(func)

            for param_name, param in _v_signature.parameters.items():
                if param_name in _v_bound_args.arguments or param.default is not inspect.Parameter.empty:
                    continue
                if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                    continue
                _v_type = _v_hints.get(param_name, param.annotation)
                if _v_type is inspect.Parameter.empty:
                    continue
                _v_type = unwrap_optional(_v_type)
                if not is_builtin_type(_v_type):
                    _v_bound_args.arguments[param_name] = self._v_container.get(identifier_of(_v_type))

            return func(*_v_bound_args.args, **_v_bound_args.kwargs)

        return wrapper

    def get(self, service_id: Union[str, type], args: Optional[Dict[str, Any]] = None) -> Any:
        """서비스 조회"""
        return self._v_container.get(service_id, args)

    def create(self, service_id: Union[str, type], args: Optional[Dict[str, Any]] = None) -> Any:
        """서비스 생성"""
        return self._v_container.create(service_id, args)


# 전역 의존성 주입기
_global_container: Optional[ServiceContainer] = None
_global_injector: Optional[DependencyInjector] = None


def set_global_container(container: ServiceContainer):
    """전역 컨테이너 설정"""
    global _global_container, _global_injector
    _global_container = container
    _global_injector = DependencyInjector(container)


def get_global_container() -> ServiceContainer:
    """전역 컨테이너 조회 (없으면 설정 없는 컨테이너 생성)"""
    global _global_container
    if _global_container is None:
        set_global_container(ServiceContainer())
    return _global_container


def get_global_injector() -> DependencyInjector:
    """전역 주입기 조회"""
    global _global_injector
    if _global_injector is None:
        _global_injector = DependencyInjector(get_global_container())
    return _global_injector


def configure(config: Mapping[str, Any]) -> ServiceContainer:
    """전역 컨테이너에 설정 트리 로드"""
    return get_global_container().set_config(config)


# 편의 함수들
def inject(func: Callable[..., T]) -> Callable[..., T]:
    """전역 의존성 주입 데코레이터"""
    return get_global_injector().inject(func)


def get(service_id: Union[str, type], args: Optional[Dict[str, Any]] = None) -> Any:
    """전역 서비스 조회"""
    return get_global_container().get(service_id, args)


def create(service_id: Union[str, type], args: Optional[Dict[str, Any]] = None) -> Any:
    """전역 서비스 생성"""
    return get_global_container().create(service_id, args)


def get_container_stats() -> Dict[str, Any]:
    """전역 컨테이너 통계 조회"""
    return get_global_container().get_container_stats()


def reset_container():
    """전역 컨테이너 초기화"""
    global _global_container, _global_injector
    if _global_container is not None:
        _global_container.clear()
    _global_container = None
    _global_injector = None
