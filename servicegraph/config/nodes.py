"""
설정 트리 노드 이름 상수
"""

NODE_PREFERENCE = 'preference'
NODE_NAMESPACE = 'namespace'
NODE_PACKAGE = 'package'
NODE_REQUIRE = 'require'
NODE_SETTINGS = 'settings'

NODE_CLASS = 'class'
NODE_SHARED = 'shared'
NODE_WEAK = 'weak'
NODE_PROTOTYPE = 'prototype'
NODE_LIFECYCLE = 'lifecycle'
NODE_ARGUMENTS = 'arguments'
NODE_PLUGINS = 'plugins'
NODE_FACTORY = 'factory'
NODE_UNRESOLVED = 'unresolved'

NODE_PLUGIN_MANAGER = 'plugin-manager'
NODE_PRIORITY = 'priority'
NODE_ENABLED = 'enabled'
NODE_CACHE = 'cache'
NODE_SIZE = 'size'
NODE_NAMESPACE_SEPARATOR = 'namespace-separator'

# 서비스 참조 인자: {"kind": "service", "id": "..."}
ARGUMENT_KIND = 'kind'
ARGUMENT_KIND_ALIAS = 'type'
ARGUMENT_KIND_SERVICE = 'service'
ARGUMENT_ID = 'id'
