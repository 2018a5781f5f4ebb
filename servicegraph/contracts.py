"""
서비스 계약(마커) 클래스

서비스 클래스가 상속하면 설정 없이도 생명주기나 플러그인 동작이 결정됩니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class SharedService:
    """공유 생명주기 계약 (설정에 lifecycle이 없을 때 적용)"""


class PrototypeService:
    """프로토타입 생명주기 계약 (설정에 lifecycle이 없을 때 적용)"""


class Injectable:
    """DependencyInjection 플러그인 대상 계약

    생성 후 inject() 메서드와 @injector 표시 메서드가 호출됩니다.
    """

    INJECT_METHOD = 'inject'


class AutoConfigurable(ABC):
    """AutoConfigure 플러그인 대상 계약"""

    @abstractmethod
    def configure(self, preference: Mapping[str, Any]) -> None:
        """병합된 preference로 자기 자신을 설정"""
        pass
