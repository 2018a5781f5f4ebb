"""
로깅 유틸리티 모듈

기능:
- 모듈별 로거 생성 (get_logger)
- 콘솔/파일 핸들러 설정 (setup_logging)
- JSON 형식 구조화 로깅
- 해결(resolution) 추적용 trace_id
"""

import logging
import json
import uuid
from datetime import datetime
from typing import Optional
from contextvars import ContextVar

# trace_id를 위한 컨텍스트 변수 (스레드/태스크 안전)
_trace_id: ContextVar[str] = ContextVar('servicegraph_trace_id', default='')


def get_trace_id() -> str:
    """현재 trace_id 반환"""
    return _trace_id.get()


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """새 trace_id 설정 (없으면 자동 생성)"""
    if trace_id is None:
        trace_id = str(uuid.uuid4())[:8]
    _trace_id.set(trace_id)
    return trace_id


def clear_trace_id():
    """trace_id 초기화"""
    _trace_id.set('')


class TraceIdContext:
    """trace_id 컨텍스트 관리자

    최상위 get()/create() 호출 하나를 하나의 trace로 묶을 때 사용합니다.
    이미 trace_id가 있으면 그대로 이어서 사용합니다.
    """

    def __init__(self, trace_id: Optional[str] = None):
        self.trace_id = trace_id
        self._token = None

    def __enter__(self):
        if self.trace_id is None and get_trace_id():
            return get_trace_id()
        self._token = _trace_id.set(self.trace_id or str(uuid.uuid4())[:8])
        return get_trace_id()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _trace_id.reset(self._token)
            self._token = None


def setup_logging(log_file: str = None, level: int = None, json_format: bool = False):
    """로깅 설정

    Args:
        log_file: 로그 파일 경로 (콘솔만 사용 시 None)
        level: 로깅 레벨 (None이면 환경 설정값 사용)
        json_format: JSON 형식 출력 여부
    """
    if level is None:
        from servicegraph.config.settings import LOG_LEVEL
        level = logging.getLevelName(LOG_LEVEL)
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger('servicegraph')
    root_logger.setLevel(level)

    # 기존 핸들러 제거
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # 콘솔 핸들러
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter('%(levelname)s %(name)s - %(message)s'))
    root_logger.addHandler(console_handler)

    # 파일 핸들러 (설정된 경우)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            )
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """로거 인스턴스 생성

    Args:
        name: 로거 이름 (보통 __name__ 사용)

    Returns:
        로거 인스턴스
    """
    return logging.getLogger(name)


class JSONFormatter(logging.Formatter):
    """JSON 형식 로그 포맷터

    로그 분석 시스템 연동을 위한 구조화된 JSON 출력.
    """

    def __init__(self, include_extras: bool = True, ensure_ascii: bool = False):
        """초기화

        Args:
            include_extras: 추가 필드 포함 여부
            ensure_ascii: ASCII만 출력 여부 (한글은 False)
        """
        super().__init__()
        self.include_extras = include_extras
        self.ensure_ascii = ensure_ascii

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 JSON 문자열로 변환"""
        log_data = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        # trace_id 추가
        trace_id = get_trace_id()
        if trace_id:
            log_data['trace_id'] = trace_id

        # 예외 정보 추가
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # 추가 필드 (record에 동적으로 추가된 속성)
        if self.include_extras:
            standard_attrs = {
                'name', 'msg', 'args', 'created', 'filename', 'funcName',
                'levelname', 'levelno', 'lineno', 'module', 'msecs',
                'pathname', 'process', 'processName', 'relativeCreated',
                'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
                'message', 'asctime', 'taskName'
            }
            extras = {
                k: v for k, v in record.__dict__.items()
                if k not in standard_attrs and not k.startswith('_')
            }
            if extras:
                log_data['extra'] = extras

        return json.dumps(log_data, ensure_ascii=self.ensure_ascii, default=str)
