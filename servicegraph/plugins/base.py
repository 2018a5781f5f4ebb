"""
플러그인 기본 클래스 구현

이 모듈은 모든 플러그인이 상속하는 기본 클래스와 여러 플러그인을 묶는
AggregatePlugin을 정의합니다.
"""

from typing import Any, Mapping

from servicegraph.exceptions import PluginError
from servicegraph.interfaces import IPlugin, IServiceContext, PluginPhase
from servicegraph.reflection import load_class
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)


class AbstractPlugin(IPlugin):
    """플러그인 기본 구현 클래스

    훅은 기본적으로 아무 것도 하지 않으므로 필요한 단계만 재정의합니다.
    """

    priority = 0

    @classmethod
    def before(cls, context: IServiceContext, args: Any = None) -> None:
        pass

    @classmethod
    def after(cls, service: Any, context: IServiceContext, args: Any = None) -> None:
        pass


def load_plugin(plugin_id: Any) -> type:
    """플러그인 식별자를 플러그인 클래스로 로드

    Raises:
        PluginError: before/after 훅이 없는 경우
    """
    _v_plugin = load_class(plugin_id)
    if not callable(getattr(_v_plugin, 'before', None)) or not callable(getattr(_v_plugin, 'after', None)):
        raise PluginError(
            f"'{plugin_id}' is not a plugin: before() and after() hooks are required",
            plugin_id=str(plugin_id)
        )
    return _v_plugin


class AggregatePlugin(AbstractPlugin):
    """여러 플러그인을 순서대로 실행하는 플러그인

    args는 {plugin_id: plugin_args} 매핑이며 전파 중단을 따릅니다.
    """

    @classmethod
    def before(cls, context: IServiceContext, args: Any = None) -> None:
        for _v_plugin, _v_args in cls._iter_plugins(args):
            if context.is_propagation_stopped(PluginPhase.BEFORE):
                break
            _v_plugin.before(context, _v_args)

    @classmethod
    def after(cls, service: Any, context: IServiceContext, args: Any = None) -> None:
        for _v_plugin, _v_args in cls._iter_plugins(args):
            if context.is_propagation_stopped(PluginPhase.AFTER):
                break
            _v_plugin.after(service, context, _v_args)

    @classmethod
    def _iter_plugins(cls, args: Any):
        if not args:
            return
        if not isinstance(args, Mapping):
            raise PluginError(
                f"AggregatePlugin expects a mapping of plugins, {type(args).__name__} given",
                plugin_id=cls.__name__
            )
        for _v_plugin_id, _v_args in args.items():
            if _v_args is False:
                continue
            yield load_plugin(_v_plugin_id), _v_args
