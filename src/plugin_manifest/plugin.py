# -*- coding: utf-8 -*-
"""
单插件清单模型 (plugin.toml)

示例::

    [plugin]
    id = "vendor.plugin-name"
    name = "Human Readable Name"
    version = "1.0.0"
    type = "extension"

    [compatibility]
    api_version = 2
    min_host_version = "0.8.0"

    [binary]
    name = "my_plugin"
"""

import os
import re
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import ManifestDocument, ManifestModel
from .exceptions import InvalidFormatError
from .utils.platform import current_platform, library_filename, matches_platform

# 当前清单格式的插件 API 版本
DEFAULT_API_VERSION = 2

# 未声明 [binary] 时的二进制名称
DEFAULT_BINARY_NAME = "plugin"

# 环境变量匹配模式: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")


class PluginMeta(ManifestModel):
    """插件元数据"""

    id: str = Field(..., description="全局唯一标识，如 vendor.plugin-name")
    name: str = Field(..., description="显示名称")
    version: str = Field(..., description="插件版本 (语义化版本)")
    plugin_type: str = Field(..., alias="type", description="插件类型，如 core/extension/theme")
    author: str = Field(default="", description="插件作者")
    description: str = Field(default="", description="插件描述")
    license: Optional[str] = Field(default=None, description="许可证 (SPDX)")
    homepage: Optional[str] = Field(default=None, description="项目主页")


class CompatibilityInfo(ManifestModel):
    """兼容性信息"""

    api_version: int = Field(default=DEFAULT_API_VERSION, ge=0, description="插件 API 版本")
    min_host_version: Optional[str] = Field(default=None, description="最低宿主版本")
    max_host_version: Optional[str] = Field(default=None, description="最高宿主版本")
    platforms: List[str] = Field(default_factory=list, description="支持的平台，空表示全部")
    depends_on: List[str] = Field(default_factory=list, description="需要先加载的插件 ID")

    def supports_current_platform(self) -> bool:
        """未限制平台，或声明的平台中有一个匹配当前平台"""
        if not self.platforms:
            return True
        return any(matches_platform(p) for p in self.platforms)


class BinaryInfo(ManifestModel):
    """二进制信息"""

    name: str = Field(default=DEFAULT_BINARY_NAME, description="不含 lib 前缀和扩展名的名称")
    checksums: Dict[str, str] = Field(default_factory=dict, description="各平台的 SHA256 校验和")


class SignatureInfo(ManifestModel):
    """签名信息，仅透传，不做校验"""

    public_key: str = Field(..., description="Ed25519 公钥 (base64)")
    signature_file: str = Field(..., description="签名文件路径 (相对清单)")


class ConfigInfo(ManifestModel):
    """默认配置值"""

    defaults: Dict[str, Any] = Field(default_factory=dict, description="默认配置")

    def resolve_defaults(self) -> Dict[str, Any]:
        """
        返回解析环境变量后的默认配置

        支持在配置值中使用 ${VAR_NAME} 语法引用环境变量，占位符可以出现在
        字符串的任意位置。

        Returns:
            解析后的配置副本

        Raises:
            InvalidFormatError: 当环境变量未设置时抛出
        """

        def _substitute(match: re.Match) -> str:
            env_var_name = match.group(1)
            env_var_value = os.getenv(env_var_name)
            if env_var_value is None:
                raise InvalidFormatError(f"环境变量 '{env_var_name}' 未设置")
            return env_var_value

        def _resolve(value: Any) -> Any:
            if isinstance(value, str):
                return ENV_VAR_PATTERN.sub(_substitute, value)
            elif isinstance(value, dict):
                return {k: _resolve(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [_resolve(v) for v in value]
            else:
                return value

        return _resolve(dict(self.defaults))


class ServiceDeclaration(ManifestModel):
    """插件提供的服务"""

    id: str = Field(..., description="服务 ID，如 adi.indexer.search")
    version: str = Field(..., description="服务版本")
    description: str = Field(default="", description="服务描述")


class ServiceRequirement(ManifestModel):
    """插件依赖的服务"""

    id: str = Field(..., description="服务 ID")
    min_version: Optional[str] = Field(default=None, description="最低版本")
    optional: bool = Field(default=False, description="是否为可选依赖")


class CapabilityDeclaration(ManifestModel):
    """
    能力声明

    与服务声明结构相同，但属于协议命名空间，用于跨插件的能力发现与路由。
    """

    protocol: str = Field(..., description="协议名称，如 embeddings、llm.chat")
    version: str = Field(..., description="协议版本")
    description: str = Field(default="", description="能力描述")


class CliConfig(ManifestModel):
    """
    命令行配置

    存在 [cli] 段时，插件注册为宿主 CLI 的顶层子命令。命令名约定为小写字母、
    数字和连字符，此处不做强制校验。
    """

    command: str = Field(..., description="命令名")
    description: str = Field(..., description="--help 中显示的描述")
    aliases: List[str] = Field(default_factory=list, description="命令别名")
    dynamic_completions: bool = Field(default=False, description="是否启用动态补全")


class TagsInfo(ManifestModel):
    """分类标签"""

    categories: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)


class HiveInfo(ManifestModel):
    """hive 插件元数据"""

    category: str = Field(..., description="类别，如 runner/proxy/health")
    name: str = Field(..., description="类别内名称，如 docker")


class TranslationInfo(ManifestModel):
    """翻译插件元数据"""

    translates: str = Field(..., description="被翻译的插件 ID")
    language: str = Field(..., description="语言代码，如 en-US")
    language_name: str = Field(..., description="语言名称")
    namespace: str = Field(..., description="翻译命名空间")


class LanguageInfo(ManifestModel):
    """语言分析插件元数据"""

    id: str = Field(..., description="语言标识，如 rust")
    extensions: List[str] = Field(..., description="文件扩展名")


class RequirementsInfo(ManifestModel):
    """平台要求"""

    os: Optional[str] = None
    arch: Optional[str] = None
    notes: Optional[str] = None


class PluginManifest(ManifestDocument):
    """
    单插件清单

    由 plugin.toml 解析得到，或由多插件包展开得到；构造后不可变。
    """

    plugin: PluginMeta
    compatibility: CompatibilityInfo = Field(default_factory=CompatibilityInfo)
    binary: BinaryInfo = Field(default_factory=BinaryInfo)
    signature: Optional[SignatureInfo] = None
    config: ConfigInfo = Field(default_factory=ConfigInfo)
    provides: List[ServiceDeclaration] = Field(default_factory=list)
    requires: List[ServiceRequirement] = Field(default_factory=list)
    cli: Optional[CliConfig] = None
    capabilities: List[CapabilityDeclaration] = Field(default_factory=list)
    tags: Optional[TagsInfo] = None
    hive: Optional[HiveInfo] = None
    translation: Optional[TranslationInfo] = None
    language: Optional[LanguageInfo] = None
    requirements: Optional[RequirementsInfo] = None

    def binary_filename(self) -> str:
        """获取当前平台上的二进制文件名"""
        return library_filename(self.binary.name)

    def checksum_for_current_platform(self) -> Optional[str]:
        """获取当前平台的校验和，没有时返回 None"""
        return self.binary.checksums.get(current_platform())

    def supports_current_platform(self) -> bool:
        """检查是否支持当前平台"""
        return self.compatibility.supports_current_platform()
