# -*- coding: utf-8 -*-
"""
多插件包清单模型 (package.toml)

示例::

    [package]
    id = "vendor.theme-pack"
    name = "Theme Collection"
    version = "2.0.0"

    [[plugins]]
    id = "vendor.theme-dark"
    name = "Dark Theme"
    type = "theme"
    binary = "dark_theme"
"""

from typing import Dict, List, Optional, Set

from pydantic import Field

from .base import ManifestDocument, ManifestModel
from .exceptions import CircularDependencyError
from .plugin import (
    BinaryInfo,
    CompatibilityInfo,
    ConfigInfo,
    PluginManifest,
    PluginMeta,
    ServiceDeclaration,
    ServiceRequirement,
    SignatureInfo,
)
from .utils.platform import current_platform, library_filename


class PackageMeta(ManifestModel):
    """包元数据"""

    id: str = Field(..., description="包唯一标识，如 vendor.theme-pack")
    name: str = Field(..., description="显示名称")
    version: str = Field(..., description="包版本，包内所有插件共用")
    author: str = Field(default="", description="作者")
    description: str = Field(default="", description="描述")
    license: Optional[str] = Field(default=None, description="许可证 (SPDX)")
    homepage: Optional[str] = Field(default=None, description="项目主页")


class PluginDef(ManifestModel):
    """包内的插件定义"""

    id: str = Field(..., description="插件唯一标识")
    name: str = Field(..., description="显示名称")
    plugin_type: str = Field(..., alias="type", description="插件类型")
    binary: str = Field(..., description="不含 lib 前缀和扩展名的二进制名称")
    description: Optional[str] = Field(default=None, description="描述，缺省继承包描述")
    depends_on: List[str] = Field(default_factory=list, description="依赖的同包插件 ID")
    config: Optional[ConfigInfo] = Field(default=None, description="插件专属配置")
    provides: List[ServiceDeclaration] = Field(default_factory=list)
    requires: List[ServiceRequirement] = Field(default_factory=list)

    def binary_filename(self) -> str:
        """获取当前平台上的二进制文件名"""
        return library_filename(self.binary)


class PackageBinaryInfo(ManifestModel):
    """包二进制信息（整个包归档共用的校验和）"""

    checksums: Dict[str, str] = Field(default_factory=dict)


class PackageManifest(ManifestDocument):
    """
    多插件包清单

    `plugins` 保持声明顺序，不代表安装顺序；安装顺序由 install_order() 计算。
    """

    package: PackageMeta
    compatibility: CompatibilityInfo = Field(default_factory=CompatibilityInfo)
    plugins: List[PluginDef]
    binary: PackageBinaryInfo = Field(default_factory=PackageBinaryInfo)
    signature: Optional[SignatureInfo] = None

    def expand_plugins(self) -> List[PluginManifest]:
        """
        将包展开为独立的单插件清单

        每个插件继承包的版本、作者、许可证、主页、兼容性、校验和与签名；
        插件自身声明 depends_on 时覆盖包级 depends_on。展开结果不含
        cli、capabilities 及各类型专属段。

        Returns:
            与 plugins 声明顺序一致的清单列表
        """
        manifests = []
        for plugin_def in self.plugins:
            compatibility = self.compatibility
            if plugin_def.depends_on:
                compatibility = compatibility.model_copy(
                    update={"depends_on": list(plugin_def.depends_on)}
                )

            manifests.append(
                PluginManifest(
                    plugin=PluginMeta(
                        id=plugin_def.id,
                        name=plugin_def.name,
                        version=self.package.version,
                        plugin_type=plugin_def.plugin_type,
                        author=self.package.author,
                        description=(
                            plugin_def.description
                            if plugin_def.description is not None
                            else self.package.description
                        ),
                        license=self.package.license,
                        homepage=self.package.homepage,
                    ),
                    compatibility=compatibility,
                    binary=BinaryInfo(
                        name=plugin_def.binary,
                        checksums=dict(self.binary.checksums),
                    ),
                    signature=self.signature,
                    config=plugin_def.config or ConfigInfo(),
                    provides=list(plugin_def.provides),
                    requires=list(plugin_def.requires),
                )
            )
        return manifests

    def install_order(self) -> List[PluginDef]:
        """
        计算插件安装顺序，保证依赖先于依赖方

        按声明顺序做深度优先后序遍历。不在本包中的依赖 ID 直接跳过。

        Returns:
            按安装顺序排列的插件定义

        Raises:
            CircularDependencyError: 存在循环依赖，携带检测到环的插件 ID
        """
        plugin_map: Dict[str, PluginDef] = {p.id: p for p in self.plugins}
        finalized: Set[str] = set()
        in_progress: Set[str] = set()
        result: List[PluginDef] = []

        def visit(plugin_id: str) -> None:
            if plugin_id in finalized:
                return
            if plugin_id in in_progress:
                raise CircularDependencyError(plugin_id)

            plugin = plugin_map.get(plugin_id)
            if plugin is None:
                return

            in_progress.add(plugin_id)
            for dep_id in plugin.depends_on:
                visit(dep_id)
            in_progress.discard(plugin_id)
            finalized.add(plugin_id)
            result.append(plugin)

        for plugin in self.plugins:
            visit(plugin.id)

        return result

    def checksum_for_current_platform(self) -> Optional[str]:
        """获取当前平台的包校验和，没有时返回 None"""
        return self.binary.checksums.get(current_platform())

    def supports_current_platform(self) -> bool:
        """检查是否支持当前平台"""
        return self.compatibility.supports_current_platform()
