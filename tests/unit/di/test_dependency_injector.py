"""
DependencyInjector 및 전역 컨테이너 편의 함수 테스트
"""

import pytest

from servicegraph.di import injector
from servicegraph.di.container import ServiceContainer
from servicegraph.di.injector import DependencyInjector
from servicegraph.exceptions import ConfigurationNotLoaded


class Clock:
    pass


class Calendar:
    def __init__(self, clock: Clock):
        self.clock = clock


class TestDependencyInjector:
    """함수 주입 데코레이터 테스트"""

    def test_missing_service_parameters_injected(self, make_container):
        """전달되지 않은 서비스 타입 파라미터 주입"""
        container = make_container({"preference": {Clock: {"shared": True}}})

        @DependencyInjector(container).inject
        def schedule(title: str, clock: Clock, calendar: Calendar):
            return title, clock, calendar

        title, clock, calendar = schedule("meeting")

        assert title == "meeting"
        assert clock is container.get(Clock)
        assert calendar.clock is clock

    def test_explicit_argument_kept(self, make_container):
        """직접 전달한 인자는 그대로 사용"""
        container = make_container()
        own_clock = Clock()

        @DependencyInjector(container).inject
        def tick(clock: Clock):
            return clock

        assert tick(own_clock) is own_clock
        assert tick(clock=own_clock) is own_clock

    def test_defaults_and_builtins_not_injected(self, make_container):
        """기본값이 있거나 내장 타입인 파라미터는 주입하지 않음"""
        container = make_container()

        @DependencyInjector(container).inject
        def render(count: int, clock: Clock = None):
            return count, clock

        assert render(3) == (3, None)


class TestGlobalContainer:
    """전역 컨테이너 테스트"""

    def test_default_global_container_unconfigured(self):
        """설정 없이 만든 전역 컨테이너"""
        with pytest.raises(ConfigurationNotLoaded):
            injector.get(Clock)

    def test_configure_and_get(self):
        """전역 컨테이너 설정 후 조회"""
        injector.configure({"preference": {Clock: {"shared": True}}})

        assert injector.get(Clock) is injector.get(Clock)
        assert injector.create(Clock) is not None
        assert injector.get_container_stats()['registered_services'] == 1

    def test_set_global_container(self):
        """전역 컨테이너 교체"""
        container = ServiceContainer({})
        injector.set_global_container(container)

        @injector.inject
        def current(calendar: Calendar):
            return calendar

        assert injector.get_global_container() is container
        assert isinstance(current().clock, Clock)

    def test_reset_container(self):
        """초기화 후 새 컨테이너"""
        container = injector.get_global_container()
        injector.reset_container()
        assert injector.get_global_container() is not container
