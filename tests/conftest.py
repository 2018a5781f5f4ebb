"""
Pytest configuration file.
"""

import logging
import sys
from pathlib import Path

import pytest

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from servicegraph.di import injector  # noqa: E402
from servicegraph.di.container import ServiceContainer  # noqa: E402
from servicegraph.utils.log_utils import clear_trace_id, setup_logging  # noqa: E402


# 테스트용 로깅 설정
@pytest.fixture(autouse=True)
def test_logging():
    """테스트용 로깅 설정 (DEBUG)"""
    setup_logging(level=logging.DEBUG)
    yield
    clear_trace_id()


# 전역 컨테이너 초기화
@pytest.fixture(autouse=True)
def reset_global_container():
    """테스트 간 전역 컨테이너 공유 방지"""
    yield
    injector.reset_container()


@pytest.fixture
def make_container():
    """설정 트리로 컨테이너를 만드는 fixture

    Returns:
        Callable: config(dict) -> ServiceContainer
    """
    def _make(config=None):
        return ServiceContainer(config if config is not None else {})

    return _make
