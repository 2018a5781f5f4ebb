"""
서비스 레지스트리 모듈

이 모듈은 생성된 서비스 인스턴스를 보관하는 식별자 -> 인스턴스 저장소를 제공합니다.
강한 참조, 약한 참조, 프로토타입(복제 반환) 항목을 지원합니다.
"""

import copy
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from servicegraph.exceptions import InvalidServiceInstance
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class RegistryEntry:
    """레지스트리 항목"""
    reference: Any
    is_weak: bool = False
    is_prototype: bool = False

    @property
    def instance(self) -> Optional[Any]:
        """저장된 인스턴스 (약한 참조가 끊어졌으면 None)"""
        if self.is_weak:
            return self.reference()
        return self.reference

    @property
    def is_alive(self) -> bool:
        return self.instance is not None


class ServiceRegistry:
    """서비스 레지스트리 클래스"""

    def __init__(self):
        self._v_entries: Dict[str, RegistryEntry] = {}
        self._v_lock = threading.RLock()

    def register(self,
                 service_id: str,
                 instance: Any,
                 weak: bool = False,
                 prototype: bool = False) -> 'ServiceRegistry':
        """인스턴스 등록

        Args:
            service_id: 공유 식별자
            instance: 저장할 인스턴스
            weak: 약한 참조로 저장 (외부 강한 참조가 사라지면 수거됨)
            prototype: 템플릿으로 저장 (get()이 복제본 반환)

        Raises:
            InvalidServiceInstance: None이거나 약한 참조를 만들 수 없는 인스턴스
        """
        if instance is None:
            raise InvalidServiceInstance(service_id, "instance must not be None")

        with self._v_lock:
            if weak:
                try:
                    _v_reference = weakref.ref(instance, self._make_reaper(service_id))
                except TypeError as e:
                    raise InvalidServiceInstance(
                        service_id,
                        f"'{type(instance).__name__}' does not support weak references"
                    ) from e
            else:
                _v_reference = instance

            self._v_entries[service_id] = RegistryEntry(
                reference=_v_reference,
                is_weak=weak,
                is_prototype=prototype
            )

        logger.debug(
            f"Registered '{service_id}' "
            f"({'weak' if weak else 'prototype' if prototype else 'strong'})"
        )
        return self

    def get(self, service_id: str) -> Optional[Any]:
        """인스턴스 조회 (없으면 None)

        프로토타입 항목은 템플릿이 아닌 깊은 복사본을 반환합니다.
        """
        _v_entry = self._v_entries.get(service_id)
        if _v_entry is None:
            return None

        _v_instance = _v_entry.instance
        if _v_instance is None:
            self._drop_dead(service_id, _v_entry)
            return None

        if _v_entry.is_prototype:
            return copy.deepcopy(_v_instance)
        return _v_instance

    def has(self, service_id: str) -> bool:
        """등록 여부 확인 (수거된 약한 참조는 미등록으로 취급)"""
        _v_entry = self._v_entries.get(service_id)
        if _v_entry is None:
            return False
        if not _v_entry.is_alive:
            self._drop_dead(service_id, _v_entry)
            return False
        return True

    def get_entry(self, service_id: str) -> Optional[RegistryEntry]:
        return self._v_entries.get(service_id)

    def remove(self, service_id: str) -> bool:
        """항목 제거"""
        with self._v_lock:
            if service_id in self._v_entries:
                del self._v_entries[service_id]
                logger.debug(f"Removed '{service_id}' from registry")
                return True
        return False

    def clear(self):
        """모든 항목 제거"""
        with self._v_lock:
            self._v_entries.clear()

    def get_service_ids(self) -> List[str]:
        """살아있는 항목의 식별자 목록"""
        return [service_id for service_id in list(self._v_entries) if self.has(service_id)]

    def get_stats(self) -> Dict[str, int]:
        """항목 통계 조회"""
        _v_stats = {'strong': 0, 'weak': 0, 'prototype': 0}
        for _v_entry in list(self._v_entries.values()):
            if not _v_entry.is_alive:
                continue
            if _v_entry.is_weak:
                _v_stats['weak'] += 1
            elif _v_entry.is_prototype:
                _v_stats['prototype'] += 1
            else:
                _v_stats['strong'] += 1
        return _v_stats

    def _make_reaper(self, service_id: str):
        """약한 참조 수거 콜백 생성"""
        _v_registry_ref = weakref.ref(self)

        def _reap(reference):
            _v_registry = _v_registry_ref()
            if _v_registry is None:
                return
            with _v_registry._v_lock:
                _v_entry = _v_registry._v_entries.get(service_id)
                # 같은 식별자로 다시 등록된 항목은 건드리지 않음
                if _v_entry is not None and _v_entry.reference is reference:
                    del _v_registry._v_entries[service_id]

        return _reap

    def _drop_dead(self, service_id: str, entry: RegistryEntry):
        with self._v_lock:
            if self._v_entries.get(service_id) is entry:
                del self._v_entries[service_id]

    def __contains__(self, service_id: str) -> bool:
        return self.has(service_id)

    def __len__(self) -> int:
        return len(self.get_service_ids())

    def __str__(self) -> str:
        return f"ServiceRegistry(services={len(self)})"

    def __repr__(self) -> str:
        return self.__str__()
