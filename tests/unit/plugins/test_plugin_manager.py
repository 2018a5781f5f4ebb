"""
PluginManager 테스트

전역/클래스 선언/preference 플러그인 병합, 우선순위, 전파 중단을 검증합니다.
"""

import pytest

from servicegraph.config.schema import EngineSettings
from servicegraph.di.container import ServiceContainer
from servicegraph.exceptions import PluginError
from servicegraph.interfaces import PluginPhase
from servicegraph.plugins.base import AbstractPlugin
from servicegraph.plugins.decorators import plugin
from servicegraph.plugins.manager import PluginManager
from servicegraph.reflection import identifier_of

CALLS = []


class RecordingPlugin(AbstractPlugin):
    """호출 기록 플러그인 기본 클래스"""

    @classmethod
    def before(cls, context, args=None):
        CALLS.append((cls.__name__, 'before', args))

    @classmethod
    def after(cls, service, context, args=None):
        CALLS.append((cls.__name__, 'after', args))


class First(RecordingPlugin):
    pass


class Second(RecordingPlugin):
    pass


class Urgent(RecordingPlugin):
    priority = 100


class Stopper(RecordingPlugin):
    priority = 50

    @classmethod
    def before(cls, context, args=None):
        super().before(context, args)
        context.stop_propagation(PluginPhase.BEFORE)


class Failing(AbstractPlugin):
    @classmethod
    def before(cls, context, args=None):
        raise RuntimeError("plugin failed")


class NotAPlugin:
    pass


class Widget:
    pass


@plugin(First, {"source": "class"})
class DecoratedWidget:
    pass


@pytest.fixture(autouse=True)
def clear_calls():
    CALLS.clear()
    yield
    CALLS.clear()


def make_container(preference=None, global_plugins=None):
    return ServiceContainer({
        "preference": preference or {},
        "settings": {"plugin-manager": {"plugins": global_plugins or {}}},
    })


def names(phase):
    return [name for name, called_phase, _ in CALLS if called_phase == phase]


class TestPluginSources:
    """플러그인 출처 병합 테스트"""

    def test_global_plugins_run(self):
        """전역 플러그인은 모든 서비스에 적용"""
        make_container(global_plugins={First: None}).get(Widget)
        assert CALLS == [("First", "before", None), ("First", "after", None)]

    def test_preference_plugins_run(self):
        """preference 플러그인 실행"""
        make_container(preference={Widget: {"plugins": {Second: {"key": "value"}}}}).get(Widget)
        assert CALLS == [("Second", "before", {"key": "value"}), ("Second", "after", {"key": "value"})]

    def test_class_declared_plugins_run(self):
        """@plugin으로 선언한 플러그인 실행"""
        make_container().get(DecoratedWidget)
        assert CALLS[0] == ("First", "before", {"source": "class"})

    def test_preference_overrides_class_args(self):
        """preference 인자가 클래스 선언 인자보다 우선"""
        make_container(preference={DecoratedWidget: {"plugins": {First: {"source": "preference"}}}}).get(
            DecoratedWidget
        )
        assert CALLS[0] == ("First", "before", {"source": "preference"})

    def test_descriptor_false_disables_global(self):
        """preference의 False는 전역 플러그인 비활성화"""
        make_container(
            preference={Widget: {"plugins": {First: False}}},
            global_plugins={First: None, Second: None},
        ).get(Widget)
        assert names('before') == ["Second"]

    def test_descriptor_false_disables_declared(self):
        """preference의 False는 클래스 선언 플러그인도 비활성화"""
        make_container(preference={DecoratedWidget: {"plugins": {First: False}}}).get(DecoratedWidget)
        assert CALLS == []

    def test_globally_disabled(self):
        """전역 설정의 enabled: False는 건너뜀"""
        make_container(global_plugins={First: {"enabled": False}, Second: None}).get(Widget)
        assert names('before') == ["Second"]

    def test_plugin_by_identifier_string(self):
        """문자열 식별자로 지정한 플러그인"""
        make_container(global_plugins={identifier_of(Second): None}).get(Widget)
        assert names('after') == ["Second"]


class TestPluginOrdering:
    """실행 순서 테스트"""

    def test_priority_attribute(self):
        """priority 속성이 높은 플러그인부터"""
        make_container(global_plugins={First: None, Urgent: None}).get(Widget)
        assert names('before') == ["Urgent", "First"]

    def test_priority_from_args(self):
        """설정의 priority가 속성보다 우선하고 훅 인자에서는 제거"""
        make_container(global_plugins={First: None, Second: {"priority": 200, "mode": "x"}, Urgent: None}).get(Widget)

        assert names('before') == ["Second", "Urgent", "First"]
        assert CALLS[0] == ("Second", "before", {"mode": "x"})

    def test_stable_on_ties(self):
        """같은 우선순위는 선언 순서 유지"""
        make_container(global_plugins={Second: None, First: None}).get(Widget)
        assert names('before') == ["Second", "First"]

    def test_before_runs_before_after(self):
        """before 훅이 모두 끝난 뒤 after 훅 실행"""
        make_container(global_plugins={First: None, Second: None}).get(Widget)
        assert [phase for _, phase, _ in CALLS] == ["before", "before", "after", "after"]


class TestPropagation:
    """전파 중단 테스트"""

    def test_stop_before_phase_only(self):
        """before 단계만 중단되고 after 단계는 계속"""
        make_container(global_plugins={Urgent: None, Stopper: None, First: None}).get(Widget)

        assert names('before') == ["Urgent", "Stopper"]
        assert names('after') == ["Urgent", "Stopper", "First"]

    def test_stop_is_per_resolution(self):
        """전파 중단은 현재 해결에만 적용"""
        container = make_container(global_plugins={Stopper: None, First: None})
        container.get(Widget)
        CALLS.clear()
        container.get(Widget)

        assert names('before') == ["Stopper"]
        assert names('after') == ["Stopper", "First"]


class TestPluginErrors:
    """플러그인 오류 테스트"""

    def test_hook_exception_propagates(self):
        """훅 예외는 감싸지 않고 전파, 인스턴스는 등록되지 않음"""
        container = make_container(preference={Widget: {"shared": True, "plugins": {Failing: None}}})

        with pytest.raises(RuntimeError, match="plugin failed"):
            container.get(Widget)
        assert not container.has(Widget)

    def test_invalid_plugin(self):
        """훅이 없는 클래스는 PluginError"""
        with pytest.raises(PluginError):
            make_container(global_plugins={NotAPlugin: None}).get(Widget)


class TestManagerApi:
    """관리자 API 테스트"""

    def test_configure_from_settings(self):
        manager = PluginManager().configure(EngineSettings.model_validate({
            "plugin-manager": {"plugins": {First: {"priority": 5}}},
        }))
        assert manager.get_global_plugins() == {identifier_of(First): {"priority": 5}}

    def test_add_and_remove(self):
        manager = PluginManager()
        manager.add_plugin(First)

        assert identifier_of(First) in manager.get_global_plugins()
        assert manager.remove_plugin(First) is True
        assert manager.remove_plugin(First) is False

    def test_added_plugin_applies(self):
        """컨테이너의 관리자에 추가한 플러그인 적용"""
        container = make_container()
        container.plugin_manager.add_plugin(Second, {"added": True})
        container.get(Widget)
        assert CALLS[0] == ("Second", "before", {"added": True})

    def test_remove_plugin_added_without_args(self):
        """인자 없이 추가한 플러그인도 제거되고 더 이상 실행되지 않음"""
        container = make_container(global_plugins={First: None})

        assert container.plugin_manager.remove_plugin(First) is True
        container.get(Widget)

        assert CALLS == []
        assert container.plugin_manager.get_global_plugins() == {}
