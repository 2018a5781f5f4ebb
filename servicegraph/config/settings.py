"""
Engine settings module.

환경 변수(.env 포함)에서 엔진 기본값을 읽습니다. 설정 트리의
``settings`` 노드가 있으면 그 값이 여기의 기본값보다 우선합니다.
"""

import os
from dotenv import load_dotenv

# .env 파일 로드
load_dotenv()

# 로깅 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = os.getenv('SERVICEGRAPH_LOG_LEVEL', 'INFO').upper()

# 컨텍스트(설명자) 캐시 사용 여부
CONTEXT_CACHE_ENABLED = os.getenv('SERVICEGRAPH_CONTEXT_CACHE', 'false').lower() in ('1', 'true', 'yes', 'on')

# 컨텍스트 캐시 최대 항목 수
CONTEXT_CACHE_SIZE = int(os.getenv('SERVICEGRAPH_CONTEXT_CACHE_SIZE', '1024'))

# 네임스페이스 구분자
NAMESPACE_SEPARATOR = os.getenv('SERVICEGRAPH_NAMESPACE_SEPARATOR', '.')
