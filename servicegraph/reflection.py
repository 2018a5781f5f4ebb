"""
리플렉션 모듈

서비스 식별자와 클래스 사이의 변환, 생성자 파라미터 분석,
인스턴스화 가능 여부 판단을 담당합니다.
"""

import builtins
import importlib
import inspect
import threading
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from servicegraph.exceptions import ServiceNotFound
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)

# 자동 주입 대상이 될 수 없는 타입들
BUILTIN_TYPES = frozenset(
    obj for obj in vars(builtins).values() if isinstance(obj, type)
) | frozenset([type(None), Any])

_NON_SERVICE_MODULES = frozenset(['builtins', 'collections.abc', 'typing', 'abc', 'types'])
_UNION_TYPES = (Union, types.UnionType)


@dataclass(frozen=True)
class ParameterInfo:
    """생성자 파라미터 정보"""
    name: str
    declared_type: Any = None
    has_default: bool = False
    default: Any = None
    is_optional: bool = False
    is_positional_only: bool = False


def identifier_of(target: Union[str, type, Any]) -> str:
    """클래스 또는 문자열을 서비스 식별자로 변환"""
    if isinstance(target, str):
        return target
    if inspect.isclass(target) or inspect.isfunction(target):
        _v_identifier = f"{target.__module__}.{target.__qualname__}"
        default_loader.remember(_v_identifier, target)
        return _v_identifier
    raise TypeError(f"Cannot derive a service identifier from {target!r}")


class ClassLoader:
    """식별자 -> 클래스(또는 호출 가능 객체) 로더

    identifier_of()로 본 적이 있는 객체는 모듈에서 import할 수 없는
    지역 클래스라도 다시 찾을 수 있도록 기억해 둡니다.
    """

    def __init__(self):
        self._v_known: Dict[str, Any] = {}
        self._v_lock = threading.Lock()

    def remember(self, identifier: str, target: Any):
        """식별자와 객체 매핑 기억"""
        with self._v_lock:
            self._v_known[identifier] = target

    def load(self, identifier: Union[str, type]) -> Any:
        """식별자에 해당하는 객체 로드

        Raises:
            ServiceNotFound: 객체를 찾을 수 없는 경우
        """
        if not isinstance(identifier, str):
            return identifier

        if identifier in self._v_known:
            return self._v_known[identifier]

        _v_target = self._import(identifier)
        if _v_target is None:
            raise ServiceNotFound(identifier)

        self.remember(identifier, _v_target)
        return _v_target

    def exists(self, identifier: Union[str, type]) -> bool:
        """객체 존재 여부 확인"""
        if not isinstance(identifier, str):
            return True
        return identifier in self._v_known or self._import(identifier) is not None

    def _import(self, identifier: str) -> Optional[Any]:
        """'pkg.module.Class' 또는 'pkg.module:Class' 형식 import"""
        if ':' in identifier:
            _v_module_name, _, _v_attr_path = identifier.partition(':')
            return self._import_attribute(_v_module_name, _v_attr_path.split('.'))

        _v_parts = identifier.split('.')
        # 가장 긴 모듈 경로부터 시도 (중첩 클래스 지원)
        for _v_split in range(len(_v_parts) - 1, 0, -1):
            _v_target = self._import_attribute('.'.join(_v_parts[:_v_split]), _v_parts[_v_split:])
            if _v_target is not None:
                return _v_target
        return None

    def _import_attribute(self, module_name: str, attr_path: List[str]) -> Optional[Any]:
        try:
            _v_target = importlib.import_module(module_name)
        except ImportError:
            return None

        for _v_attr in attr_path:
            _v_target = getattr(_v_target, _v_attr, None)
            if _v_target is None:
                return None
        return _v_target

    def clear(self):
        with self._v_lock:
            self._v_known.clear()


default_loader = ClassLoader()


def class_exists(identifier: Union[str, type]) -> bool:
    """클래스 존재 여부 확인"""
    return inspect.isclass(identifier) or (
        default_loader.exists(identifier) and inspect.isclass(default_loader.load(identifier))
    )


def load_class(identifier: Union[str, type]) -> type:
    """식별자에 해당하는 클래스 로드

    Raises:
        ServiceNotFound: 클래스가 없거나 클래스가 아닌 경우
    """
    _v_target = default_loader.load(identifier)
    if not inspect.isclass(_v_target):
        raise ServiceNotFound(identifier_of(identifier) if not isinstance(identifier, str) else identifier)
    return _v_target


def load_callable(identifier: Union[str, Any]) -> Any:
    """식별자에 해당하는 호출 가능 객체 로드"""
    if callable(identifier) and not isinstance(identifier, str):
        return identifier
    _v_target = default_loader.load(identifier)
    if not callable(_v_target):
        raise ServiceNotFound(identifier)
    return _v_target


def is_instantiable(cls: type) -> bool:
    """인스턴스화 가능 여부 (추상 클래스, 프로토콜 제외)"""
    if not inspect.isclass(cls):
        return False
    if inspect.isabstract(cls):
        return False
    if getattr(cls, '_is_protocol', False):
        return False
    return True


def is_builtin_type(declared_type: Any) -> bool:
    """자동 주입이 불가능한 내장 타입 여부

    해석하지 못한 문자열 어노테이션은 서비스 식별자이므로 내장 타입이 아닙니다.
    """
    if isinstance(declared_type, str):
        return False
    if declared_type in BUILTIN_TYPES:
        return True
    # List[str], Dict[str, int], Callable[..., X], Union[A, B] 등의 제네릭
    _v_origin = typing.get_origin(declared_type)
    if _v_origin is not None:
        return not inspect.isclass(_v_origin) or is_builtin_type(_v_origin)
    if not inspect.isclass(declared_type):
        return True
    return declared_type.__module__ in _NON_SERVICE_MODULES


def unwrap_optional(declared_type: Any) -> Any:
    """Optional[X] -> X"""
    if typing.get_origin(declared_type) in _UNION_TYPES:
        _v_args = [arg for arg in typing.get_args(declared_type) if arg is not type(None)]
        if len(_v_args) == 1:
            return _v_args[0]
    return declared_type


def get_parameter_hints(func: Any) -> Dict[str, Any]:
    """파라미터별 타입 힌트 조회

    어노테이션을 하나씩 평가하므로 해석할 수 없는 전방 참조가 있어도
    나머지 파라미터의 타입은 정상적으로 얻습니다. 해석하지 못한 문자열
    어노테이션은 그대로 두며 서비스 식별자로 사용됩니다.
    """
    _v_globals = getattr(inspect.unwrap(getattr(func, '__func__', func)), '__globals__', {})
    _v_hints: Dict[str, Any] = {}
    for param_name, param in inspect.signature(func).parameters.items():
        _v_annotation = param.annotation
        if _v_annotation is inspect.Parameter.empty:
            continue
        if isinstance(_v_annotation, str):
            _v_holder = types.SimpleNamespace(__annotations__={param_name: _v_annotation})
            try:
                _v_annotation = typing.get_type_hints(_v_holder, globalns=_v_globals)[param_name]
            except (NameError, TypeError, SyntaxError):
                logger.debug(f"Could not evaluate annotation '{_v_annotation}' of {func!r}")
        _v_hints[param_name] = _v_annotation
    return _v_hints


def get_constructor_parameters(cls: type) -> Tuple[ParameterInfo, ...]:
    """생성자 파라미터 목록 조회

    *args, **kwargs는 is_optional=True로 표시됩니다.
    """
    if cls.__init__ is object.__init__:
        return ()

    _v_signature = inspect.signature(cls.__init__)
    _v_hints = get_parameter_hints(cls.__init__)

    _v_parameters = []
    for param_name, param in list(_v_signature.parameters.items())[1:]:
        _v_declared = _v_hints.get(param_name)

        _v_parameters.append(ParameterInfo(
            name=param_name,
            declared_type=unwrap_optional(_v_declared) if _v_declared is not None else None,
            has_default=param.default is not inspect.Parameter.empty,
            default=None if param.default is inspect.Parameter.empty else param.default,
            is_optional=param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD),
            is_positional_only=param.kind == inspect.Parameter.POSITIONAL_ONLY,
        ))

    return tuple(_v_parameters)
