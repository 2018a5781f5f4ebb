"""
서비스 팩토리 기본 클래스

다른 서비스를 생성하는 공유 팩토리 서비스의 기본 구현입니다.
팩토리 클래스는 의존성 스택에 추가되므로 팩토리 네임스페이스의
preference가 생성되는 서비스에도 적용됩니다.
"""

from typing import Any, Dict, Optional, Tuple, Union

from servicegraph.contracts import SharedService
from servicegraph.interfaces import IServiceContainer, IServiceContext
from servicegraph.reflection import identifier_of


class ServiceFactory(SharedService):
    """서비스 팩토리 기본 클래스

    Example:
        class ConnectionFactory(ServiceFactory):
            def create(self, dsn: str):
                return self.create_service('app.db.Connection', {'dsn': dsn})
    """

    def __init__(self, container: IServiceContainer, context: IServiceContext):
        self._v_container = container
        self._v_context = context

    @property
    def container(self) -> IServiceContainer:
        return self._v_container

    @property
    def context(self) -> IServiceContext:
        return self._v_context

    def create_service(self,
                       service_id: Union[str, type],
                       args: Optional[Dict[str, Any]] = None) -> Any:
        """팩토리 범위에서 새 서비스 생성"""
        return self._v_container.create(service_id, args, self.get_dependency_stack())

    def get_dependency_stack(self) -> Tuple[str, ...]:
        """팩토리 클래스를 포함한 의존성 스택"""
        _v_stack = tuple(self._v_context.dependency_stack)
        _v_factory_id = identifier_of(type(self))
        if not _v_stack or _v_stack[-1] != _v_factory_id:
            _v_stack += (_v_factory_id,)
        return _v_stack
