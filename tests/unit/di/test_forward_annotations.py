"""
지연 평가 어노테이션(from __future__ import annotations) 해석 테스트

일부 어노테이션을 해석할 수 없어도 나머지 파라미터는 타입으로 자동 연결되고,
해석하지 못한 이름은 서비스 식별자로 사용되는지 검증합니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import pytest

from servicegraph.di.container import ServiceContainer
from servicegraph.di.injector import DependencyInjector
from servicegraph.exceptions import ServiceNotFound
from servicegraph.reflection import get_constructor_parameters, get_parameter_hints, is_builtin_type

if TYPE_CHECKING:
    from servicegraph.di.registry import ServiceRegistry as TypeCheckingOnly


class Clock:
    pass


class Consumer:
    def __init__(self, clock: Clock, name: str = "consumer", other: Optional[TypeCheckingOnly] = None):
        self.clock = clock
        self.name = name
        self.other = other


class NamedConsumer:
    def __init__(self, clock: Clock, mailer: OutboundMailer):
        self.clock = clock
        self.mailer = mailer


class TestParameterHints:
    """파라미터별 어노테이션 해석 테스트"""

    def test_resolvable_annotations_evaluated(self):
        """해석 가능한 어노테이션은 다른 파라미터와 무관하게 평가"""
        hints = get_parameter_hints(Consumer.__init__)

        assert hints["clock"] is Clock
        assert hints["name"] is str
        assert hints["other"] == "Optional[TypeCheckingOnly]"

    def test_constructor_parameters(self):
        parameters = {parameter.name: parameter for parameter in get_constructor_parameters(NamedConsumer)}

        assert parameters["clock"].declared_type is Clock
        assert parameters["mailer"].declared_type == "OutboundMailer"

    def test_unresolved_name_is_not_builtin(self):
        """해석하지 못한 이름은 내장 타입이 아님"""
        assert not is_builtin_type("OutboundMailer")


class TestAutowiring:
    """지연 평가 어노테이션 자동 연결 테스트"""

    def test_autowire_despite_unresolvable_sibling(self):
        """해석할 수 없는 어노테이션이 있어도 Clock은 자동 연결"""
        consumer = ServiceContainer({}).get(Consumer)

        assert isinstance(consumer.clock, Clock)
        assert consumer.other is None

    def test_unresolved_name_used_as_identifier(self):
        """해석하지 못한 이름은 서비스 식별자로 조회"""
        container = ServiceContainer({"preference": {"OutboundMailer": {"class": Clock, "shared": True}}})

        consumer = container.get(NamedConsumer)

        assert consumer.mailer is container.get("OutboundMailer")

    def test_unconfigured_name_not_found(self):
        """설정에 없는 이름은 ServiceNotFound"""
        with pytest.raises(ServiceNotFound):
            ServiceContainer({}).get(NamedConsumer)

    def test_function_injection(self):
        """함수 주입도 파라미터별로 해석"""
        container = ServiceContainer({"preference": {Clock: {"shared": True}}})

        @DependencyInjector(container).inject
        def tick(clock: Clock, other: TypeCheckingOnly = None):
            return clock, other

        assert tick() == (container.get(Clock), None)
