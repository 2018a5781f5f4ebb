"""
플러그인 데코레이터 모듈

클래스에 플러그인을 선언하는 데코레이터와 주입 메서드 표시 데코레이터를 제공합니다.
"""

from typing import Any, Callable, List, Tuple, Type, Union

from servicegraph.reflection import identifier_of

_DECLARED_PLUGINS_ATTR = '__servicegraph_plugins__'
_INJECTOR_ATTR = '__servicegraph_injector__'


def plugin(plugin_id: Union[str, type], args: Any = None):
    """
    클래스에 플러그인을 선언하는 데코레이터 (반복 사용 가능)

    선언된 플러그인은 preference의 plugins보다 먼저 병합되므로
    preference에서 같은 플러그인을 False로 지정하면 비활성화됩니다.

    Args:
        plugin_id: 플러그인 식별자 또는 플러그인 클래스
        args: 플러그인 훅에 전달할 인자

    Returns:
        데코레이터 함수

    Example:
        @plugin(AutoConfigure)
        @plugin("myapp.plugins.Audit", {"level": "info"})
        class ReportService(AutoConfigurable):
            pass
    """
    _v_plugin_id = identifier_of(plugin_id)

    def decorator(cls: Type) -> Type:
        _v_declared = list(cls.__dict__.get(_DECLARED_PLUGINS_ATTR, ()))
        # 데코레이터는 아래에서 위로 적용되므로 앞에 추가해서 선언 순서 유지
        _v_declared.insert(0, (_v_plugin_id, args))
        setattr(cls, _DECLARED_PLUGINS_ATTR, tuple(_v_declared))
        return cls

    return decorator


def get_declared_plugins(cls: Type) -> List[Tuple[str, Any]]:
    """클래스에 직접 선언된 플러그인 목록 (선언 순서)"""
    return list(cls.__dict__.get(_DECLARED_PLUGINS_ATTR, ()))


def injector(func: Callable) -> Callable:
    """DependencyInjection 플러그인이 생성 후 호출할 메서드 표시"""
    setattr(func, _INJECTOR_ATTR, True)
    return func


def is_injector(func: Any) -> bool:
    return getattr(func, _INJECTOR_ATTR, False) is True
