"""
플러그인 관리자 모듈

전역 설정 플러그인, 클래스 선언 플러그인, preference 플러그인을 합쳐
우선순위 순서로 before/after 훅을 실행합니다.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from servicegraph.config import nodes
from servicegraph.config.schema import EngineSettings
from servicegraph.interfaces import PluginPhase
from servicegraph.plugins.base import load_plugin
from servicegraph.reflection import identifier_of
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)

# 플러그인 인자 중 관리자가 사용하는 제어 키
_CONTROL_KEYS = (nodes.NODE_PRIORITY, nodes.NODE_ENABLED)


@dataclass(frozen=True)
class PluginEntry:
    """실행할 플러그인 항목"""
    plugin_id: str
    plugin: type
    args: Any
    priority: int


class PluginManager:
    """플러그인 관리자 클래스"""

    def __init__(self):
        self._v_global_plugins: Dict[str, Any] = {}
        self._v_lock = threading.RLock()

    def configure(self, settings: Optional[EngineSettings]) -> 'PluginManager':
        """settings 노드의 plugin-manager.plugins로 전역 플러그인 설정"""
        with self._v_lock:
            self._v_global_plugins = {}
            if settings is not None:
                for _v_plugin_id, _v_args in settings.plugin_manager.plugins.items():
                    self._v_global_plugins[_v_plugin_id] = _v_args
        logger.debug(f"Plugin manager configured with {len(self._v_global_plugins)} global plugins")
        return self

    def add_plugin(self, plugin_id: Any, args: Any = None) -> 'PluginManager':
        """전역 플러그인 추가"""
        with self._v_lock:
            self._v_global_plugins[identifier_of(plugin_id)] = args
        return self

    def remove_plugin(self, plugin_id: Any) -> bool:
        """전역 플러그인 제거"""
        _v_plugin_id = identifier_of(plugin_id)
        with self._v_lock:
            if _v_plugin_id not in self._v_global_plugins:
                return False
            del self._v_global_plugins[_v_plugin_id]
            return True

    def get_global_plugins(self) -> Dict[str, Any]:
        return dict(self._v_global_plugins)

    def collect(self, context) -> List[PluginEntry]:
        """컨텍스트에 적용할 플러그인 목록 (우선순위 높은 순, 같으면 선언 순)"""
        _v_merged: Dict[str, Any] = {}

        for _v_plugin_id, _v_args in self._v_global_plugins.items():
            if isinstance(_v_args, Mapping) and _v_args.get(nodes.NODE_ENABLED, True) is False:
                continue
            _v_merged[_v_plugin_id] = _v_args

        for _v_plugin_id, _v_args in context.plugins.items():
            if _v_args is False:
                _v_merged.pop(_v_plugin_id, None)
                continue
            _v_merged[_v_plugin_id] = _v_args

        _v_entries = []
        for _v_plugin_id, _v_args in _v_merged.items():
            if context.is_plugin_disabled(_v_plugin_id):
                continue
            _v_plugin = load_plugin(_v_plugin_id)
            _v_entries.append(PluginEntry(
                plugin_id=_v_plugin_id,
                plugin=_v_plugin,
                args=self._strip_control_keys(_v_args),
                priority=self._get_priority(_v_plugin, _v_args),
            ))

        # sorted는 안정 정렬이므로 같은 우선순위는 선언 순서 유지
        return sorted(_v_entries, key=lambda entry: -entry.priority)

    def before(self, context) -> None:
        """인스턴스 생성 전 훅 실행"""
        for _v_entry in self.collect(context):
            if context.is_propagation_stopped(PluginPhase.BEFORE):
                logger.debug(f"Before-phase propagation stopped for '{context.service_id}'")
                break
            logger.debug(f"Plugin before: {_v_entry.plugin_id} -> {context.service_id}")
            _v_entry.plugin.before(context, _v_entry.args)

    def after(self, service: Any, context) -> None:
        """인스턴스 생성 후 훅 실행"""
        for _v_entry in self.collect(context):
            if context.is_propagation_stopped(PluginPhase.AFTER):
                logger.debug(f"After-phase propagation stopped for '{context.service_id}'")
                break
            logger.debug(f"Plugin after: {_v_entry.plugin_id} -> {context.service_id}")
            _v_entry.plugin.after(service, context, _v_entry.args)

    @staticmethod
    def _get_priority(plugin: type, args: Any) -> int:
        if isinstance(args, Mapping) and nodes.NODE_PRIORITY in args:
            return int(args[nodes.NODE_PRIORITY])
        return int(getattr(plugin, 'priority', 0) or 0)

    @staticmethod
    def _strip_control_keys(args: Any) -> Any:
        if isinstance(args, Mapping):
            return {key: value for key, value in args.items() if key not in _CONTROL_KEYS}
        return args

    def __str__(self) -> str:
        return f"PluginManager(plugins={len(self._v_global_plugins)})"

    def __repr__(self) -> str:
        return self.__str__()
