"""
서비스 생명주기 관리 모듈

이 모듈은 생성된 인스턴스를 생명주기 정책에 따라 레지스트리에 보관하는
클래스들을 정의합니다.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict

from servicegraph.config.schema import Lifecycle
from servicegraph.di.registry import ServiceRegistry


class LifecyclePolicy(ABC):
    """생명주기 정책 기본 클래스"""

    cacheable = True

    @abstractmethod
    def store(self, registry: ServiceRegistry, shared_id: str, instance: Any) -> Any:
        """인스턴스 보관 후 호출자에게 돌려줄 인스턴스 반환"""
        pass

    @abstractmethod
    def get_lifecycle_type(self) -> Lifecycle:
        """생명주기 타입 반환"""
        pass


class TransientPolicy(LifecyclePolicy):
    """일시적 생명주기 - 보관하지 않음"""

    cacheable = False

    def store(self, registry: ServiceRegistry, shared_id: str, instance: Any) -> Any:
        return instance

    def get_lifecycle_type(self) -> Lifecycle:
        return Lifecycle.TRANSIENT


class SharedPolicy(LifecyclePolicy):
    """공유 생명주기 - 강한 참조로 보관"""

    def store(self, registry: ServiceRegistry, shared_id: str, instance: Any) -> Any:
        registry.register(shared_id, instance)
        return instance

    def get_lifecycle_type(self) -> Lifecycle:
        return Lifecycle.SHARED


class WeakPolicy(LifecyclePolicy):
    """약한 공유 생명주기 - 외부 참조가 있는 동안만 보관"""

    def store(self, registry: ServiceRegistry, shared_id: str, instance: Any) -> Any:
        registry.register(shared_id, instance, weak=True)
        return instance

    def get_lifecycle_type(self) -> Lifecycle:
        return Lifecycle.WEAK


class PrototypePolicy(LifecyclePolicy):
    """프로토타입 생명주기 - 템플릿을 보관하고 복제본 반환"""

    def store(self, registry: ServiceRegistry, shared_id: str, instance: Any) -> Any:
        registry.register(shared_id, instance, prototype=True)
        # 첫 호출자도 템플릿이 아닌 복제본을 받음
        return registry.get(shared_id)

    def get_lifecycle_type(self) -> Lifecycle:
        return Lifecycle.PROTOTYPE


_POLICIES: Dict[Lifecycle, LifecyclePolicy] = {
    Lifecycle.TRANSIENT: TransientPolicy(),
    Lifecycle.SHARED: SharedPolicy(),
    Lifecycle.WEAK: WeakPolicy(),
    Lifecycle.PROTOTYPE: PrototypePolicy(),
}


def get_policy(lifecycle: Lifecycle) -> LifecyclePolicy:
    """생명주기 정책 조회"""
    return _POLICIES[Lifecycle(lifecycle)]


class SharedIdLocks:
    """공유 식별자별 생성 잠금

    같은 식별자의 최초 생성이 동시에 여러 번 일어나지 않도록 합니다.
    """

    def __init__(self):
        self._v_locks: Dict[str, threading.RLock] = {}
        self._v_lock = threading.Lock()

    def get_lock(self, shared_id: str) -> threading.RLock:
        with self._v_lock:
            _v_lock = self._v_locks.get(shared_id)
            if _v_lock is None:
                _v_lock = threading.RLock()
                self._v_locks[shared_id] = _v_lock
            return _v_lock

    def discard(self, shared_id: str):
        with self._v_lock:
            self._v_locks.pop(shared_id, None)

    def clear(self):
        with self._v_lock:
            self._v_locks.clear()

    def __len__(self) -> int:
        return len(self._v_locks)
