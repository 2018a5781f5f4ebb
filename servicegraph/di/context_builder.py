"""
컨텍스트 빌더 모듈

요청된 식별자와 현재 의존성 스택을 받아 package -> namespace -> 전역
preference를 순서대로 병합하고, 그 결과로 ServiceContext를 만듭니다.

병합 규칙:
- 스택의 모든 항목(루트부터 요청 식별자까지)이 네임스페이스 범위를 제공
- 한 항목 안에서는 짧은 네임스페이스부터 병합 (긴 네임스페이스가 우선)
- 네임스페이스마다 require 패키지 preference를 먼저, 자신의 preference를 나중에 병합
- 전역 preference[식별자]는 식별자 자신의 범위보다 우선
- 조상 항목을 통해서만 도달하는 범위는 전역 preference보다 우선
"""

import copy
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from servicegraph.config import nodes
from servicegraph.config.schema import ConfigTree
from servicegraph.di.context import ServiceContext
from servicegraph.reflection import identifier_of
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)


def deep_merge(target: Any, source: Any) -> Any:
    """source를 target에 깊은 병합한 새 값을 반환

    매핑은 키 단위, 리스트는 인덱스 단위로 재귀 병합하고 스칼라는 덮어씁니다.
    입력값은 변경하지 않습니다.
    """
    if isinstance(target, Mapping) and isinstance(source, Mapping):
        _v_result = dict(target)
        for key, value in source.items():
            if key in _v_result:
                _v_result[key] = deep_merge(_v_result[key], value)
            else:
                _v_result[key] = copy.deepcopy(value)
        return _v_result

    if isinstance(target, list) and isinstance(source, list):
        _v_result = list(target)
        for index, value in enumerate(source):
            if index < len(_v_result):
                _v_result[index] = deep_merge(_v_result[index], value)
            else:
                _v_result.append(copy.deepcopy(value))
        return _v_result

    return copy.deepcopy(source)


class ContextCache:
    """병합된 preference 항목 LRU 캐시

    키는 '스택 => 식별자' 이며 값은 조회할 때마다 복사해서 반환합니다.
    """

    def __init__(self, max_size: int = 1024):
        self._v_entries: 'OrderedDict[str, Tuple[Dict[str, Any], Tuple[str, ...]]]' = OrderedDict()
        self._v_max_size = max_size
        self._v_lock = threading.Lock()
        self._v_hits = 0
        self._v_misses = 0

    @staticmethod
    def make_key(service_id: str, dependency_stack: Sequence[str]) -> str:
        return '=>'.join(list(dependency_stack) + [service_id])

    def get(self, key: str) -> Optional[Tuple[Dict[str, Any], Tuple[str, ...]]]:
        with self._v_lock:
            if key not in self._v_entries:
                self._v_misses += 1
                return None
            self._v_entries.move_to_end(key)
            self._v_hits += 1
            _v_preference, _v_stack = self._v_entries[key]
        return copy.deepcopy(_v_preference), _v_stack

    def set(self, key: str, preference: Dict[str, Any], dependency_stack: Tuple[str, ...]):
        with self._v_lock:
            self._v_entries[key] = (copy.deepcopy(preference), dependency_stack)
            self._v_entries.move_to_end(key)
            while len(self._v_entries) > self._v_max_size:
                self._v_entries.popitem(last=False)

    def clear(self):
        with self._v_lock:
            self._v_entries.clear()

    def get_stats(self) -> Dict[str, int]:
        return {
            'entries': len(self._v_entries),
            'hits': self._v_hits,
            'misses': self._v_misses,
        }

    def __len__(self) -> int:
        return len(self._v_entries)


class ContextBuilder:
    """컨텍스트 빌더 클래스"""

    def __init__(self, container, config: ConfigTree, cache: Optional[ContextCache] = None):
        self._v_container = container
        self._v_config = config
        self._v_separator = config.settings.namespace_separator
        self._v_cache = cache

    @property
    def config(self) -> ConfigTree:
        return self._v_config

    @property
    def cache(self) -> Optional[ContextCache]:
        return self._v_cache

    def build(self,
              service_id: str,
              dependency_stack: Sequence[str] = (),
              overrides: Optional[Mapping[str, Any]] = None) -> ServiceContext:
        """서비스 컨텍스트 생성

        Args:
            service_id: 요청 식별자
            dependency_stack: 현재 의존성 스택 (요청 식별자 미포함)
            overrides: 요청 식별자 항목 위에 마지막으로 병합할 값

        Returns:
            병합된 preference를 가진 새 ServiceContext
        """
        _v_cache_key = None
        if self._v_cache is not None and not overrides:
            _v_cache_key = ContextCache.make_key(service_id, dependency_stack)
            _v_cached = self._v_cache.get(_v_cache_key)
            if _v_cached is not None:
                logger.debug(f"Context cache hit: {_v_cache_key}")
                _v_preference, _v_stack = _v_cached
                return ServiceContext(self._v_container, service_id, _v_preference, _v_stack)

        # 작업용 스택 복사본에 요청 식별자 추가
        _v_stack: List[str] = list(dependency_stack) + [service_id]

        _v_preferences = self.build_preferences(service_id, _v_stack)
        if overrides:
            _v_preferences[service_id] = deep_merge(_v_preferences.get(service_id, {}), overrides)

        if service_id in _v_preferences:
            _v_service_preference = _v_preferences[service_id]
        else:
            # 설정에 없는 식별자는 그대로 클래스 이름으로 사용 (자동 연결)
            _v_service_preference = {nodes.NODE_UNRESOLVED: True}

        # 해결된 클래스를 스택에 추가해서 하위 조회가 구현 클래스의 네임스페이스도 보도록 함
        _v_class = _v_service_preference.get(nodes.NODE_CLASS)
        if _v_class is not None:
            _v_class_id = identifier_of(_v_class)
            if _v_class_id != _v_stack[-1]:
                _v_stack.append(_v_class_id)

        if _v_cache_key is not None:
            self._v_cache.set(_v_cache_key, _v_service_preference, tuple(_v_stack))

        logger.debug(
            f"Context built for '{service_id}' "
            f"(class={_v_class_id if _v_class is not None else service_id}, stack={_v_stack})"
        )
        return ServiceContext(self._v_container, service_id, _v_service_preference, _v_stack)

    def build_preferences(self, service_id: str, dependency_stack: Sequence[str]) -> Dict[str, Any]:
        """스택 전체를 따라 병합된 preference 맵 생성 (새 누적 맵)

        병합 순서 (뒤쪽이 우선):
        1. 요청 식별자 자신의 네임스페이스 범위
        2. 전역 preference[요청 식별자]
        3. 조상 항목(루트부터)을 통해서만 도달하는 네임스페이스 범위

        3은 특정 소비자 아래에서만 적용되는 바인딩이므로 전역 바인딩보다 우선합니다.
        """
        _v_preferences: Dict[str, Any] = {}
        _v_processed_packages: Set[str] = set()
        _v_processed_namespaces: Set[str] = set()

        _v_preferences = self._process_entry(
            service_id, _v_preferences, _v_processed_namespaces, _v_processed_packages
        )

        if service_id in self._v_config.preference:
            _v_preferences = deep_merge(
                _v_preferences, {service_id: self._v_config.preference[service_id]}
            )

        _v_ancestors = list(dependency_stack)
        if _v_ancestors and _v_ancestors[-1] == service_id:
            _v_ancestors.pop()
        for _v_entry in _v_ancestors:
            _v_preferences = self._process_entry(
                _v_entry, _v_preferences, _v_processed_namespaces, _v_processed_packages
            )

        return _v_preferences

    def _process_entry(self,
                       entry: str,
                       preferences: Dict[str, Any],
                       processed_namespaces: Set[str],
                       processed_packages: Set[str]) -> Dict[str, Any]:
        """스택 항목 하나의 네임스페이스 범위 병합 (짧은 네임스페이스부터)"""
        for _v_namespace in self.get_namespaces_for_id(entry):
            if _v_namespace in processed_namespaces:
                continue
            processed_namespaces.add(_v_namespace)
            _v_scope = self._v_config.namespace[_v_namespace]

            for _v_package in _v_scope.require:
                if _v_package not in processed_packages:
                    preferences = self._process_package(_v_package, preferences, processed_packages)

            if _v_scope.preference:
                preferences = deep_merge(preferences, _v_scope.preference)

        return preferences

    def _process_package(self,
                         package: str,
                         preferences: Dict[str, Any],
                         processed: Set[str]) -> Dict[str, Any]:
        """패키지 require를 먼저 처리한 뒤 패키지 preference 병합"""
        if package not in self._v_config.package:
            logger.debug(f"Required package '{package}' is not configured, skipped")
            return preferences

        # 순환 require 방지
        processed.add(package)
        _v_scope = self._v_config.package[package]

        for _v_required in _v_scope.require:
            if _v_required not in processed:
                preferences = self._process_package(_v_required, preferences, processed)

        if _v_scope.preference:
            preferences = deep_merge(preferences, _v_scope.preference)

        return preferences

    def get_namespaces_for_id(self, service_id: str) -> List[str]:
        """식별자에 해당하는 설정된 네임스페이스 목록 (짧은 것부터)

        'app.admin.Controller' -> ['app.', 'app.admin.'] 중 설정된 것만.
        구분자 단위로 비교하므로 'app.admin.'이 'app.administration.X'와 매칭되지 않습니다.
        """
        _v_parts = [part for part in service_id.split(self._v_separator) if part]
        _v_namespace = ''
        _v_namespaces = []
        for _v_part in _v_parts:
            _v_namespace += _v_part + self._v_separator
            if _v_namespace in self._v_config.namespace:
                _v_namespaces.append(_v_namespace)
        return _v_namespaces
