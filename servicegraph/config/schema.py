# -*- coding: utf-8 -*-
"""
설정 트리 Pydantic 검증 모델

기능:
- 설정 트리(preference / namespace / package / settings) 구조 검증
- require 목록 정규화 (리스트, 매핑, 단일 문자열)
- 네임스페이스 키 정규화 (항상 구분자로 끝남)
- 병합된 preference 항목을 타입이 있는 읽기 전용 모델로 변환
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from servicegraph.config import settings as env_settings
from servicegraph.exceptions import ConfigurationError
from servicegraph.reflection import identifier_of
from servicegraph.utils.log_utils import get_logger

logger = get_logger(__name__)


class Lifecycle(str, Enum):
    """서비스 생명주기 정책"""
    TRANSIENT = "transient"     # 요청할 때마다 새 인스턴스
    SHARED = "shared"           # 하나의 인스턴스 공유
    WEAK = "weak"               # 외부 강한 참조가 있는 동안만 공유
    PROTOTYPE = "prototype"     # 템플릿을 복제해서 반환


def _normalize_keys(value: Any) -> Any:
    """클래스 객체 키를 식별자 문자열로 변환"""
    if isinstance(value, Mapping):
        return {identifier_of(key): item for key, item in value.items()}
    return value


class PreferenceSpec(BaseModel):
    """preference 항목 검증 모델

    병합이 끝난 항목 하나를 나타내며 생성 후 변경할 수 없습니다.
    알 수 없는 키는 플러그인이 읽을 수 있도록 그대로 보존합니다.
    """
    model_config = ConfigDict(
        extra='allow', frozen=True, populate_by_name=True, arbitrary_types_allowed=True
    )

    service_class: Optional[Union[str, Type[Any]]] = Field(None, alias='class', description="구현 클래스")
    shared: bool = Field(default=False, description="공유 인스턴스 여부")
    weak: bool = Field(default=False, description="약한 참조 공유 여부 (shared와 함께 사용)")
    prototype: bool = Field(default=False, description="프로토타입 복제 여부")
    lifecycle: Optional[Lifecycle] = Field(None, description="명시적 생명주기 (불리언보다 우선)")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="생성자 인자")
    plugins: Dict[str, Any] = Field(default_factory=dict, description="플러그인 (False면 비활성)")
    factory: Optional[Any] = Field(None, description="팩토리 (호출 가능 객체 또는 식별자)")
    unresolved: bool = Field(default=False, description="설정에 없는 식별자 여부")

    @field_validator('plugins', mode='before')
    @classmethod
    def normalize_plugin_ids(cls, v: Any) -> Any:
        """플러그인 클래스 키를 식별자로 변환"""
        if v is None:
            return {}
        return _normalize_keys(v)

    @field_validator('arguments', mode='before')
    @classmethod
    def normalize_arguments(cls, v: Any) -> Any:
        if v is None:
            return {}
        return v

    @field_validator('factory')
    @classmethod
    def validate_factory(cls, v: Any) -> Any:
        """팩토리는 호출 가능 객체 또는 식별자 문자열"""
        if v is not None and not isinstance(v, str) and not callable(v):
            raise ValueError(f'factory must be callable or an identifier: {v!r}')
        return v

    def resolve_lifecycle(self) -> Optional[Lifecycle]:
        """설정만으로 결정되는 생명주기 (결정되지 않으면 None)"""
        if self.lifecycle is not None:
            return self.lifecycle
        if self.prototype:
            return Lifecycle.PROTOTYPE
        if self.shared and self.weak:
            return Lifecycle.WEAK
        if self.shared:
            return Lifecycle.SHARED
        return None


class ScopeConfig(BaseModel):
    """namespace / package 항목 검증 모델"""
    model_config = ConfigDict(extra='allow')

    require: List[str] = Field(default_factory=list, description="필요 패키지 목록")
    preference: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="범위 preference")

    @field_validator('require', mode='before')
    @classmethod
    def normalize_require(cls, v: Any) -> Any:
        """require는 리스트, 매핑(키 사용), 단일 문자열 허용"""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, Mapping):
            return list(v.keys())
        if not isinstance(v, (list, tuple, set)):
            raise ValueError(f'require must be a list, mapping or string: {v!r}')
        return list(v)

    @field_validator('preference', mode='before')
    @classmethod
    def normalize_preference(cls, v: Any) -> Any:
        if v is None:
            return {}
        return _normalize_keys(v)


class CacheSettings(BaseModel):
    """컨텍스트 캐시 설정"""
    enabled: bool = Field(default_factory=lambda: env_settings.CONTEXT_CACHE_ENABLED)
    size: int = Field(default_factory=lambda: env_settings.CONTEXT_CACHE_SIZE, gt=0)


class PluginManagerSettings(BaseModel):
    """플러그인 관리자 설정"""
    plugins: Dict[str, Any] = Field(default_factory=dict, description="전역 플러그인")

    @field_validator('plugins', mode='before')
    @classmethod
    def normalize_plugin_ids(cls, v: Any) -> Any:
        if v is None:
            return {}
        return _normalize_keys(v)


class EngineSettings(BaseModel):
    """엔진 설정 (settings 노드)"""
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    namespace_separator: str = Field(
        default_factory=lambda: env_settings.NAMESPACE_SEPARATOR,
        alias='namespace-separator',
        min_length=1,
    )
    cache: CacheSettings = Field(default_factory=CacheSettings)
    plugin_manager: PluginManagerSettings = Field(
        default_factory=PluginManagerSettings, alias='plugin-manager'
    )


class ConfigTree(BaseModel):
    """설정 트리 검증 모델"""
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    preference: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="전역 preference")
    namespace: Dict[str, ScopeConfig] = Field(default_factory=dict, description="네임스페이스 범위")
    package: Dict[str, ScopeConfig] = Field(default_factory=dict, description="패키지 범위")
    settings: EngineSettings = Field(default_factory=EngineSettings, description="엔진 설정")

    @field_validator('preference', 'namespace', 'package', mode='before')
    @classmethod
    def normalize_sections(cls, v: Any) -> Any:
        if v is None:
            return {}
        return _normalize_keys(v)

    @model_validator(mode='after')
    def normalize_namespaces(self):
        """네임스페이스 키가 구분자로 끝나도록 정규화"""
        _v_separator = self.settings.namespace_separator
        self.namespace = {
            (key if key.endswith(_v_separator) else key + _v_separator): scope
            for key, scope in self.namespace.items()
        }
        return self

    @model_validator(mode='after')
    def validate_preferences(self):
        """모든 preference 항목이 PreferenceSpec 형식인지 검증"""
        _v_maps = [self.preference]
        _v_maps.extend(scope.preference for scope in self.namespace.values())
        _v_maps.extend(scope.preference for scope in self.package.values())
        for _v_map in _v_maps:
            for _v_id, _v_entry in _v_map.items():
                try:
                    PreferenceSpec.model_validate(_v_entry)
                except ValidationError as e:
                    raise ValueError(f"preference '{_v_id}' is invalid: {e}") from e
        return self


def load_config(data: Union[ConfigTree, Mapping[str, Any], None]) -> Optional[ConfigTree]:
    """설정 매핑을 검증된 ConfigTree로 변환

    Raises:
        ConfigurationError: 검증 실패
    """
    if data is None or isinstance(data, ConfigTree):
        return data

    try:
        _v_tree = ConfigTree.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(str(e), e) from e

    logger.debug(
        f"Configuration loaded: {len(_v_tree.preference)} preferences, "
        f"{len(_v_tree.namespace)} namespaces, {len(_v_tree.package)} packages"
    )
    return _v_tree
