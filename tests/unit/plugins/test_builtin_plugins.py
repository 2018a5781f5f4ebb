"""
기본 제공 플러그인 테스트 (DependencyInjection, AutoConfigure, AggregatePlugin)
"""

import pytest

from servicegraph.contracts import AutoConfigurable, Injectable
from servicegraph.di.container import ServiceContainer
from servicegraph.exceptions import PluginError
from servicegraph.interfaces import PluginPhase
from servicegraph.plugins.base import AbstractPlugin, AggregatePlugin
from servicegraph.plugins.builtin import AutoConfigure, DependencyInjection
from servicegraph.plugins.decorators import injector, plugin

CALLS = []


class Clock:
    pass


class EventBus:
    pass


class Tracer(AbstractPlugin):
    @classmethod
    def before(cls, context, args=None):
        CALLS.append(('Tracer', args))


class Halt(AbstractPlugin):
    @classmethod
    def before(cls, context, args=None):
        CALLS.append(('Halt', args))
        context.stop_propagation(PluginPhase.BEFORE)


@plugin(DependencyInjection)
class ReportService(Injectable):
    def __init__(self):
        self.clock = None
        self.bus = None
        self.limit = None

    def inject(self, clock: Clock, limit: int = 10):
        self.clock = clock
        self.limit = limit

    @injector
    def attach_bus(self, bus: EventBus):
        self.bus = bus

    @property
    def summary(self):
        raise AssertionError("properties must not be evaluated")


class PlainService:
    pass


class MailSettings(AutoConfigurable):
    def __init__(self):
        self.preference = None

    def configure(self, preference):
        self.preference = preference


@pytest.fixture(autouse=True)
def clear_calls():
    CALLS.clear()
    yield
    CALLS.clear()


class TestDependencyInjection:
    """메서드 주입 플러그인 테스트"""

    def test_inject_and_injector_methods(self):
        """inject()와 @injector 메서드에 의존성 주입"""
        container = ServiceContainer({"preference": {Clock: {"shared": True}}})

        report = container.get(ReportService)

        assert report.clock is container.get(Clock)
        assert isinstance(report.bus, EventBus)
        assert report.limit == 10

    def test_requires_injectable(self):
        """Injectable이 아니면 PluginError"""
        container = ServiceContainer({"preference": {PlainService: {"plugins": {DependencyInjection: None}}}})

        with pytest.raises(PluginError) as exc_info:
            container.get(PlainService)
        assert "Injectable" in str(exc_info.value)

    def test_disabled_by_preference(self):
        """preference에서 비활성화하면 주입하지 않음"""
        container = ServiceContainer({"preference": {ReportService: {"plugins": {DependencyInjection: False}}}})
        assert container.get(ReportService).clock is None


class TestAutoConfigure:
    """자동 설정 플러그인 테스트"""

    def test_configure_receives_preference(self):
        """configure()가 병합된 preference를 받음"""
        container = ServiceContainer({
            "preference": {MailSettings: {"plugins": {AutoConfigure: None}, "sender": "noreply@example.com"}},
        })

        settings = container.get(MailSettings)

        assert settings.preference["sender"] == "noreply@example.com"

    def test_requires_auto_configurable(self):
        """AutoConfigurable이 아니면 PluginError"""
        container = ServiceContainer({"preference": {PlainService: {"plugins": {AutoConfigure: None}}}})
        with pytest.raises(PluginError):
            container.get(PlainService)

    def test_configure_is_abstract(self):
        """configure()를 구현하지 않으면 인스턴스화 불가"""
        class Incomplete(AutoConfigurable):
            pass

        with pytest.raises(TypeError):
            Incomplete()


class TestAggregatePlugin:
    """묶음 플러그인 테스트"""

    def test_runs_plugins_in_order(self):
        """args 순서대로 실행하고 False는 건너뜀"""
        container = ServiceContainer({"preference": {PlainService: {"plugins": {
            AggregatePlugin: {Tracer: {"n": 1}, Halt: False, Halt.__module__ + ".Tracer": {"n": 2}},
        }}}})

        container.get(PlainService)

        assert CALLS == [('Tracer', {"n": 1}), ('Tracer', {"n": 2})]

    def test_honors_propagation_stop(self):
        """전파 중단 이후 남은 플러그인 건너뜀"""
        container = ServiceContainer({"preference": {PlainService: {"plugins": {
            AggregatePlugin: {Halt: None, Tracer: None},
        }}}})

        container.get(PlainService)

        assert CALLS == [('Halt', None)]

    def test_requires_mapping(self):
        """args가 매핑이 아니면 PluginError"""
        container = ServiceContainer({"preference": {PlainService: {"plugins": {AggregatePlugin: ["x"]}}}})
        with pytest.raises(PluginError):
            container.get(PlainService)
