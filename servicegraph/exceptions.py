"""
의존성 해결 엔진 예외 클래스들

이 모듈은 서비스 해결 과정에서 발생할 수 있는 예외들을 정의합니다.
모든 예외는 치명적이며 엔진 내부에서 재시도하지 않습니다.
"""

from typing import List, Optional


class DIException(Exception):
    """의존성 주입 시스템 기본 예외"""

    def __init__(self, message: str, service_id: str = None):
        super().__init__(message)
        self.service_id = service_id
        self.message = message

    def __str__(self):
        if self.service_id:
            return f"[{self.service_id}] {self.message}"
        return self.message


class ConfigurationNotLoaded(DIException):
    """설정 트리가 로드되지 않았을 때 발생하는 예외"""

    def __init__(self, service_id: str = None):
        super().__init__(
            "No configuration tree is loaded into the container",
            service_id
        )


class ConfigurationError(DIException):
    """설정 트리 검증에 실패했을 때 발생하는 예외"""

    def __init__(self, reason: str, inner_exception: Optional[Exception] = None):
        self.inner_exception = inner_exception
        super().__init__(f"Invalid configuration: {reason}")


class ServiceNotFound(DIException):
    """해결된 클래스를 찾거나 로드할 수 없을 때 발생하는 예외"""

    def __init__(self, service_id: str, service_class: str = None):
        self.service_class = service_class or service_id
        if service_class and service_class != service_id:
            _v_message = f"Class '{service_class}' resolved for service '{service_id}' was not found"
        else:
            _v_message = f"Service '{service_id}' was not found"
        super().__init__(_v_message, service_id)


class CircularDependency(DIException):
    """순환 의존성이 발견되었을 때 발생하는 예외"""

    def __init__(self, dependency_chain: List[str]):
        self.dependency_chain = list(dependency_chain)
        chain_str = " -> ".join(self.dependency_chain)
        super().__init__(
            f"Circular dependency detected: {chain_str}",
            self.dependency_chain[-1] if self.dependency_chain else None
        )


class NotInstantiable(DIException):
    """추상 클래스/인터페이스를 팩토리 없이 생성하려 할 때 발생하는 예외"""

    def __init__(self, service_id: str, service_class: str):
        self.service_class = service_class
        super().__init__(
            f"Class '{service_class}' is not instantiable and no factory is configured",
            service_id
        )


class UnresolvableArgument(DIException):
    """생성자 파라미터의 값을 결정할 수 없을 때 발생하는 예외"""

    def __init__(self, service_id: str, service_class: str, parameter: str, reason: str):
        self.service_class = service_class
        self.parameter = parameter
        super().__init__(
            f"Unable to resolve parameter '{parameter}' of '{service_class}': {reason}",
            service_id
        )


class TypeMismatch(DIException):
    """설정된 서비스 참조 인자가 선언 타입을 만족하지 않을 때 발생하는 예외"""

    def __init__(self, service_id: str, parameter: str, expected: str, actual: str):
        self.parameter = parameter
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Configured argument '{parameter}' must be an instance of '{expected}', '{actual}' given",
            service_id
        )


class InvalidServiceInstance(DIException):
    """레지스트리에 저장할 수 없는 인스턴스일 때 발생하는 예외"""

    def __init__(self, service_id: str, reason: str):
        super().__init__(
            f"Cannot register instance: {reason}",
            service_id
        )


class PluginError(DIException):
    """플러그인이 서비스에 적용될 수 없을 때 발생하는 예외"""

    def __init__(self, message: str, service_id: str = None, plugin_id: str = None):
        self.plugin_id = plugin_id
        super().__init__(message, service_id)
