# -*- coding: utf-8 -*-
"""
统一清单接口

自动识别单插件清单与多插件包清单，并提供一致的只读查询；
同时提供清单文件的加载与保存 (TOML / YAML / JSON)。
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .base import load_toml, read_manifest_text
from .exceptions import InvalidFormatError, ManifestIOError
from .package import PackageManifest
from .plugin import CliConfig, PluginManifest

logger = logging.getLogger(__name__)

# 包清单与单插件清单的根段名
PACKAGE_ROOT = "package"
PLUGIN_ROOT = "plugin"


class ManifestKind(str, Enum):
    """清单类型"""

    SINGLE = "single"  # plugin.toml
    PACKAGE = "package"  # package.toml


@dataclass(frozen=True)
class Manifest:
    """
    统一清单

    kind 为 SINGLE 时 value 是 PluginManifest，为 PACKAGE 时是 PackageManifest。
    所有查询都按 kind 分派。
    """

    kind: ManifestKind
    value: Union[PluginManifest, PackageManifest]

    @classmethod
    def single(cls, manifest: PluginManifest) -> "Manifest":
        return cls(ManifestKind.SINGLE, manifest)

    @classmethod
    def package(cls, manifest: PackageManifest) -> "Manifest":
        return cls(ManifestKind.PACKAGE, manifest)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        """
        根据根段识别清单类型并解析

        同时存在 [package] 与 [plugin] 时按包清单处理。

        Raises:
            InvalidFormatError: 两种根段都不存在
        """
        if PACKAGE_ROOT in data:
            return cls.package(PackageManifest.from_dict(data))
        if PLUGIN_ROOT in data:
            return cls.single(PluginManifest.from_dict(data))
        raise InvalidFormatError("清单必须包含 [plugin] 或 [package] 段")

    @classmethod
    def from_toml(cls, content: str) -> "Manifest":
        """从 TOML 字符串解析，自动识别类型"""
        return cls.from_dict(load_toml(content))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Manifest":
        """从 TOML 文件解析，自动识别类型"""
        return cls.from_toml(read_manifest_text(path))

    def is_package(self) -> bool:
        """是否为多插件包"""
        return self.kind is ManifestKind.PACKAGE

    @property
    def id(self) -> str:
        """插件 ID 或包 ID"""
        if self.kind is ManifestKind.PACKAGE:
            return self.value.package.id
        return self.value.plugin.id

    @property
    def version(self) -> str:
        """插件版本或包版本"""
        if self.kind is ManifestKind.PACKAGE:
            return self.value.package.version
        return self.value.plugin.version

    def plugin_ids(self) -> List[str]:
        """单插件返回 1 个 ID，包返回按声明顺序排列的所有插件 ID"""
        if self.kind is ManifestKind.PACKAGE:
            return [p.id for p in self.value.plugins]
        return [self.value.plugin.id]

    def cli_config(self) -> Optional[CliConfig]:
        """单插件的 CLI 配置；包不能注册顶层命令，总是返回 None"""
        if self.kind is ManifestKind.PACKAGE:
            return None
        return self.value.cli

    def expand(self) -> List[PluginManifest]:
        """展开为单插件清单列表"""
        if self.kind is ManifestKind.PACKAGE:
            return self.value.expand_plugins()
        return [self.value]


class ManifestValidator:
    """
    清单文件读写

    TOML 为标准格式；YAML 与 JSON 用于导出和与其他工具交换。
    """

    SUPPORTED_FORMATS = ("toml", "yaml", "json")

    @staticmethod
    def load_from_file(manifest_path: Union[str, Path]) -> Manifest:
        """
        从文件加载清单，按扩展名选择格式

        Raises:
            ManifestIOError: 文件不存在或无法读取
            InvalidFormatError: 不支持的文件格式或数据结构
        """
        manifest_path = Path(manifest_path)
        suffix = manifest_path.suffix.lower()

        if suffix == ".toml":
            manifest = Manifest.from_file(manifest_path)
        else:
            content = read_manifest_text(manifest_path)
            if suffix in (".yaml", ".yml"):
                try:
                    data = yaml.safe_load(content)
                except yaml.YAMLError as e:
                    raise InvalidFormatError(f"YAML 解析失败 {manifest_path}: {e}") from e
            elif suffix == ".json":
                try:
                    data = json.loads(content)
                except json.JSONDecodeError as e:
                    raise InvalidFormatError(f"JSON 解析失败 {manifest_path}: {e}") from e
            else:
                raise InvalidFormatError(f"不支持的清单文件格式: {manifest_path.suffix}")

            if not isinstance(data, dict):
                raise InvalidFormatError(f"清单顶层必须是映射: {manifest_path}")
            manifest = Manifest.from_dict(data)

        logger.debug(f"已加载清单 {manifest.id} v{manifest.version}: {manifest_path}")
        return manifest

    @staticmethod
    def save_to_file(
        manifest: Union[Manifest, PluginManifest, PackageManifest],
        manifest_path: Union[str, Path],
        format: str = "toml",
    ) -> None:
        """
        保存清单到文件

        Args:
            manifest: 统一清单或具体清单模型
            manifest_path: 目标路径，父目录不存在时自动创建
            format: toml / yaml / json

        Raises:
            InvalidFormatError: 不支持的保存格式
            ManifestIOError: 写入失败
        """
        format = format.lower()
        if format not in ManifestValidator.SUPPORTED_FORMATS:
            raise InvalidFormatError(f"不支持的保存格式: {format}")

        if isinstance(manifest, Manifest):
            manifest = manifest.value

        if format == "toml":
            content = manifest.to_toml()
        else:
            data = manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
            if format == "yaml":
                content = yaml.dump(
                    data, default_flow_style=False, allow_unicode=True, sort_keys=False, indent=2
                )
            else:
                content = json.dumps(data, ensure_ascii=False, indent=2)

        manifest_path = Path(manifest_path)
        try:
            manifest_path.parent.mkdir(parents=True, exist_ok=True)
            manifest_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ManifestIOError(f"保存清单失败 {manifest_path}: {e}") from e

        logger.debug(f"清单已保存为 {format}: {manifest_path}")
