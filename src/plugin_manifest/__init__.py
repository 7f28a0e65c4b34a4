# -*- coding: utf-8 -*-
"""
plugin-manifest: 插件清单模型与依赖解析

支持单插件清单 (plugin.toml) 与多插件包清单 (package.toml)。
"""

__version__ = "0.1.0"

# 异常
from .exceptions import (
    CircularDependencyError,
    InvalidFormatError,
    InvalidVersionError,
    ManifestError,
    ManifestIOError,
    MissingFieldError,
    TomlParseError,
)

# 生成器
from .generator import (
    generate_manifest_from_cargo,
    resolve_version,
    resolve_workspace_version,
)

# 统一清单
from .manifest import Manifest, ManifestKind, ManifestValidator

# 包清单
from .package import PackageBinaryInfo, PackageManifest, PackageMeta, PluginDef

# 单插件清单
from .plugin import (
    DEFAULT_API_VERSION,
    DEFAULT_BINARY_NAME,
    BinaryInfo,
    CapabilityDeclaration,
    CliConfig,
    CompatibilityInfo,
    ConfigInfo,
    HiveInfo,
    LanguageInfo,
    PluginManifest,
    PluginMeta,
    RequirementsInfo,
    ServiceDeclaration,
    ServiceRequirement,
    SignatureInfo,
    TagsInfo,
    TranslationInfo,
)
from .registry import ManifestRegistry
from .utils.platform import (
    ALL_PLATFORMS,
    current_platform,
    library_filename,
    matches_platform,
)

__all__ = [
    # 单插件清单
    "PluginManifest",
    "PluginMeta",
    "CompatibilityInfo",
    "BinaryInfo",
    "SignatureInfo",
    "ConfigInfo",
    "ServiceDeclaration",
    "ServiceRequirement",
    "CapabilityDeclaration",
    "CliConfig",
    "TagsInfo",
    "HiveInfo",
    "TranslationInfo",
    "LanguageInfo",
    "RequirementsInfo",
    "DEFAULT_API_VERSION",
    "DEFAULT_BINARY_NAME",
    # 包清单
    "PackageManifest",
    "PackageMeta",
    "PluginDef",
    "PackageBinaryInfo",
    # 统一清单
    "Manifest",
    "ManifestKind",
    "ManifestValidator",
    "ManifestRegistry",
    # 生成器
    "generate_manifest_from_cargo",
    "resolve_version",
    "resolve_workspace_version",
    # 平台
    "ALL_PLATFORMS",
    "current_platform",
    "library_filename",
    "matches_platform",
    # 异常
    "ManifestError",
    "ManifestIOError",
    "TomlParseError",
    "InvalidFormatError",
    "MissingFieldError",
    "InvalidVersionError",
    "CircularDependencyError",
]
