"""
기본 제공 플러그인

- DependencyInjection: 생성 후 inject() 및 @injector 메서드에 의존성 주입
- AutoConfigure: 생성 후 병합된 preference로 configure() 호출
"""

import inspect
from typing import Any, Callable, Dict

from servicegraph.contracts import AutoConfigurable, Injectable
from servicegraph.exceptions import PluginError
from servicegraph.interfaces import IServiceContext
from servicegraph.plugins.base import AbstractPlugin
from servicegraph.plugins.decorators import is_injector
from servicegraph.reflection import get_parameter_hints, identifier_of, is_builtin_type, unwrap_optional
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)


class DependencyInjection(AbstractPlugin):
    """메서드 주입 플러그인

    서비스는 Injectable을 상속해야 합니다. 타입이 선언된 파라미터만
    컨테이너에서 해결해서 전달하고 내장 타입 파라미터는 건너뜁니다.
    """

    @classmethod
    def after(cls, service: Any, context: IServiceContext, args: Any = None) -> None:
        if not isinstance(service, Injectable):
            raise PluginError(
                f"Cannot apply dependency injection to '{type(service).__name__}': "
                f"it must inherit Injectable",
                service_id=context.service_id,
                plugin_id=identifier_of(cls)
            )

        _v_inject = getattr(service, Injectable.INJECT_METHOD, None)
        if callable(_v_inject):
            _v_inject(**cls.resolve_dependencies(_v_inject, context))

        # 프로퍼티가 평가되지 않도록 클래스의 함수 멤버만 검사
        for _v_name, _v_function in inspect.getmembers(type(service), inspect.isfunction):
            if _v_name.startswith('_') or _v_name == Injectable.INJECT_METHOD:
                continue
            if is_injector(_v_function):
                logger.debug(f"Invoking injector {type(service).__name__}.{_v_name}")
                _v_method = getattr(service, _v_name)
                _v_method(**cls.resolve_dependencies(_v_method, context))

    @classmethod
    def resolve_dependencies(cls, method: Callable[..., Any], context: IServiceContext) -> Dict[str, Any]:
        """메서드 파라미터 타입으로 의존성 해결 (파라미터 이름 -> 서비스)"""
        _v_hints = get_parameter_hints(method)

        _v_dependencies = {}
        for _v_name, _v_param in inspect.signature(method).parameters.items():
            _v_type = _v_hints.get(_v_name, _v_param.annotation)
            if _v_type is inspect.Parameter.empty:
                continue
            _v_type = unwrap_optional(_v_type)
            if is_builtin_type(_v_type):
                continue
            _v_dependencies[_v_name] = context.container.get(identifier_of(_v_type))
        return _v_dependencies


class AutoConfigure(AbstractPlugin):
    """자동 설정 플러그인

    서비스는 AutoConfigurable을 상속해야 하며, configure()는
    병합된 preference(읽기 전용 매핑)를 받습니다.
    """

    @classmethod
    def after(cls, service: Any, context: IServiceContext, args: Any = None) -> None:
        if not isinstance(service, AutoConfigurable):
            raise PluginError(
                f"Cannot auto-configure '{type(service).__name__}': it must inherit AutoConfigurable",
                service_id=context.service_id,
                plugin_id=identifier_of(cls)
            )
        service.configure(context.preference)
