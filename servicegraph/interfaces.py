"""
의존성 해결 엔진 인터페이스 정의

이 모듈은 컨테이너, 서비스 컨텍스트, 플러그인의 핵심 인터페이스를 정의합니다.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence


class PluginPhase(str, Enum):
    """플러그인 실행 단계"""
    BEFORE = "before"
    AFTER = "after"


class IServiceContainer(ABC):
    """서비스 컨테이너 인터페이스"""

    @abstractmethod
    def get(self, service_id: Any, args: Optional[Dict[str, Any]] = None,
            dependency_stack: Optional[Sequence[str]] = None) -> Any:
        """서비스 조회 (캐시 사용)"""
        pass

    @abstractmethod
    def create(self, service_id: Any, args: Optional[Dict[str, Any]] = None,
               dependency_stack: Optional[Sequence[str]] = None) -> Any:
        """서비스 생성 (항상 새 인스턴스)"""
        pass

    @abstractmethod
    def has(self, service_id: Any) -> bool:
        """레지스트리 등록 여부"""
        pass

    @abstractmethod
    def register(self, service_id: Any, instance: Any, weak: bool = False) -> 'IServiceContainer':
        """인스턴스 직접 등록"""
        pass


class IServiceContext(ABC):
    """서비스 컨텍스트(설명자) 인터페이스

    플러그인과 서비스 생성자에 노출되는 해결 단위 정보입니다.
    """

    @property
    @abstractmethod
    def service_id(self) -> str:
        pass

    @property
    @abstractmethod
    def service_class(self) -> type:
        pass

    @property
    @abstractmethod
    def arguments(self) -> Mapping[str, Any]:
        pass

    @property
    @abstractmethod
    def dependency_stack(self) -> Sequence[str]:
        pass

    @property
    @abstractmethod
    def metadata(self) -> Dict[str, Any]:
        """플러그인 간 통신용 메타데이터"""
        pass

    @abstractmethod
    def set_factory(self, factory: Callable[..., Any]) -> 'IServiceContext':
        pass

    @abstractmethod
    def stop_propagation(self, phase: PluginPhase) -> 'IServiceContext':
        pass

    @abstractmethod
    def is_propagation_stopped(self, phase: PluginPhase) -> bool:
        pass


class IPlugin(ABC):
    """플러그인 인터페이스

    훅은 클래스 메서드이며 인스턴스를 만들지 않고 호출됩니다.
    """

    priority: int = 0

    @classmethod
    @abstractmethod
    def before(cls, context: IServiceContext, args: Any = None) -> None:
        """인스턴스 생성 전 훅"""
        pass

    @classmethod
    @abstractmethod
    def after(cls, service: Any, context: IServiceContext, args: Any = None) -> None:
        """인스턴스 생성 후 훅"""
        pass
