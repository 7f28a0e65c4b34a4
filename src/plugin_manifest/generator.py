# -*- coding: utf-8 -*-
"""
从 Cargo.toml 的 [package.metadata.plugin] 段生成插件清单

版本号支持工作区继承 (version.workspace = true)，向上查找工作区根的
[workspace.package] version。
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .base import load_toml, read_manifest_text
from .exceptions import InvalidFormatError, MissingFieldError
from .plugin import (
    DEFAULT_API_VERSION,
    DEFAULT_BINARY_NAME,
    BinaryInfo,
    CapabilityDeclaration,
    CliConfig,
    CompatibilityInfo,
    HiveInfo,
    LanguageInfo,
    PluginManifest,
    PluginMeta,
    RequirementsInfo,
    ServiceDeclaration,
    ServiceRequirement,
    TagsInfo,
    TranslationInfo,
)

logger = logging.getLogger(__name__)

# provides / capabilities 未声明版本时使用的版本
DEFAULT_DECLARATION_VERSION = "1.0.0"


def generate_manifest_from_cargo(cargo_toml_path: Union[str, Path]) -> PluginManifest:
    """
    根据 Cargo.toml 生成单插件清单

    Args:
        cargo_toml_path: Cargo.toml 路径

    Returns:
        插件清单

    Raises:
        ManifestIOError: 文件无法读取
        TomlParseError: TOML 语法错误
        MissingFieldError: 缺少 package、package.metadata.plugin 或其 id/name/type
        InvalidFormatError: 工作区版本无法解析
    """
    cargo_toml_path = Path(cargo_toml_path)
    doc = load_toml(read_manifest_text(cargo_toml_path))

    package = doc.get("package")
    if not isinstance(package, dict):
        raise MissingFieldError("package")

    version = resolve_version(package, cargo_toml_path)
    description = _get_str(package, "description") or ""
    author = _resolve_author(package)

    metadata_plugin = _get_table(_get_table(package, "metadata") or {}, "plugin")
    if metadata_plugin is None:
        raise MissingFieldError("package.metadata.plugin")

    required = {}
    for key in ("id", "name", "type"):
        value = _get_str(metadata_plugin, key)
        if value is None:
            raise MissingFieldError(f"package.metadata.plugin.{key}")
        required[key] = value

    manifest = PluginManifest(
        plugin=PluginMeta(
            id=required["id"],
            name=required["name"],
            version=version,
            plugin_type=required["type"],
            author=author,
            description=description,
        ),
        compatibility=_parse_compatibility(metadata_plugin),
        binary=_parse_binary(metadata_plugin),
        provides=_parse_provides(metadata_plugin),
        requires=_parse_requires(metadata_plugin),
        cli=_parse_cli(metadata_plugin),
        capabilities=_parse_capabilities(metadata_plugin),
        tags=_parse_tags(metadata_plugin),
        hive=_parse_hive(metadata_plugin),
        translation=_parse_translation(metadata_plugin),
        language=_parse_language(metadata_plugin),
        requirements=_parse_requirements(metadata_plugin),
    )

    logger.info(f"已从 {cargo_toml_path} 生成清单 {manifest.plugin.id} v{version}")
    return manifest


def resolve_version(package: Dict[str, Any], cargo_toml_path: Union[str, Path]) -> str:
    """
    解析 package.version

    字面量版本直接返回；`version.workspace = true` 时解析工作区版本。

    Raises:
        MissingFieldError: 既没有字面量版本，也没有工作区标记
        InvalidFormatError: 工作区版本无法解析
    """
    version = package.get("version")
    if isinstance(version, str):
        return version
    if isinstance(version, dict) and version.get("workspace") is True:
        return resolve_workspace_version(cargo_toml_path)
    raise MissingFieldError("package.version")


def resolve_workspace_version(cargo_toml_path: Union[str, Path]) -> str:
    """
    向上查找工作区根并读取 [workspace.package] version

    从清单所在目录的上一级开始逐级向上，跳过没有同名描述文件的目录；
    遇到的第一个描述文件决定结果，其中未声明工作区版本即解析失败。

    Raises:
        InvalidFormatError: 清单路径没有父目录 (如裸文件名 "Cargo.toml" 或根目录)，
            或找不到工作区版本
        TomlParseError: 工作区描述文件语法错误
    """
    cargo_toml_path = Path(cargo_toml_path)
    manifest_dir = cargo_toml_path.parent
    if not manifest_dir.parts or manifest_dir == cargo_toml_path:
        raise InvalidFormatError("清单路径没有父目录")

    for directory in manifest_dir.absolute().parents:
        ws_toml = directory / cargo_toml_path.name
        if not ws_toml.is_file():
            continue

        logger.debug(f"找到工作区描述文件: {ws_toml}")
        doc = load_toml(read_manifest_text(ws_toml))
        workspace_package = _get_table(_get_table(doc, "workspace") or {}, "package") or {}
        version = _get_str(workspace_package, "version")
        if version is not None:
            return version
        raise InvalidFormatError(f"{ws_toml} 未声明 [workspace.package] version")

    raise InvalidFormatError("无法解析工作区版本")


def _get_str(table: Dict[str, Any], key: str) -> Optional[str]:
    value = table.get(key)
    return value if isinstance(value, str) else None


def _get_bool(table: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = table.get(key)
    return value if isinstance(value, bool) else default


def _get_str_list(table: Dict[str, Any], key: str) -> List[str]:
    value = table.get(key)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _get_table(table: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = table.get(key)
    return value if isinstance(value, dict) else None


def _get_table_list(table: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = table.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _resolve_author(package: Dict[str, Any]) -> str:
    authors = _get_str_list(package, "authors")
    return authors[0] if authors else ""


def _parse_compatibility(meta: Dict[str, Any]) -> CompatibilityInfo:
    compat = _get_table(meta, "compatibility")
    if compat is None:
        return CompatibilityInfo()

    api_version = compat.get("api_version")
    if not isinstance(api_version, int) or isinstance(api_version, bool) or api_version < 0:
        api_version = DEFAULT_API_VERSION

    return CompatibilityInfo(
        api_version=api_version,
        min_host_version=_get_str(compat, "min_host_version"),
        max_host_version=_get_str(compat, "max_host_version"),
        platforms=_get_str_list(compat, "platforms"),
        depends_on=_get_str_list(compat, "depends_on"),
    )


def _parse_cli(meta: Dict[str, Any]) -> Optional[CliConfig]:
    cli = _get_table(meta, "cli")
    if cli is None:
        return None
    command = _get_str(cli, "command")
    if command is None:
        return None
    return CliConfig(
        command=command,
        description=_get_str(cli, "description") or "",
        aliases=_get_str_list(cli, "aliases"),
        dynamic_completions=_get_bool(cli, "dynamic_completions"),
    )


def _parse_provides(meta: Dict[str, Any]) -> List[ServiceDeclaration]:
    provides = []
    for item in _get_table_list(meta, "provides"):
        service_id = _get_str(item, "id")
        if service_id is None:
            continue
        provides.append(
            ServiceDeclaration(
                id=service_id,
                version=_get_str(item, "version") or DEFAULT_DECLARATION_VERSION,
                description=_get_str(item, "description") or "",
            )
        )
    return provides


def _parse_requires(meta: Dict[str, Any]) -> List[ServiceRequirement]:
    requires = []
    for item in _get_table_list(meta, "requires"):
        service_id = _get_str(item, "id")
        if service_id is None:
            continue
        # "version" 作为 min_version 的别名
        min_version = item.get("min_version", item.get("version"))
        requires.append(
            ServiceRequirement(
                id=service_id,
                min_version=min_version if isinstance(min_version, str) else None,
                optional=_get_bool(item, "optional"),
            )
        )
    return requires


def _parse_binary(meta: Dict[str, Any]) -> BinaryInfo:
    binary = _get_table(meta, "binary")
    if binary is None:
        return BinaryInfo()
    return BinaryInfo(name=_get_str(binary, "name") or DEFAULT_BINARY_NAME)


def _parse_tags(meta: Dict[str, Any]) -> Optional[TagsInfo]:
    tags = _get_table(meta, "tags")
    if tags is None:
        return None
    return TagsInfo(
        categories=_get_str_list(tags, "categories"),
        platforms=_get_str_list(tags, "platforms"),
    )


def _parse_hive(meta: Dict[str, Any]) -> Optional[HiveInfo]:
    hive = _get_table(meta, "hive")
    if hive is None:
        return None
    category = _get_str(hive, "category")
    name = _get_str(hive, "name")
    if category is None or name is None:
        return None
    return HiveInfo(category=category, name=name)


def _parse_translation(meta: Dict[str, Any]) -> Optional[TranslationInfo]:
    tr = _get_table(meta, "translation")
    if tr is None:
        return None
    translates = _get_str(tr, "translates")
    language = _get_str(tr, "language")
    if translates is None or language is None:
        return None
    return TranslationInfo(
        translates=translates,
        language=language,
        language_name=_get_str(tr, "language_name") or "",
        namespace=_get_str(tr, "namespace") or "",
    )


def _parse_language(meta: Dict[str, Any]) -> Optional[LanguageInfo]:
    lang = _get_table(meta, "language")
    if lang is None:
        return None
    lang_id = _get_str(lang, "id")
    if lang_id is None:
        return None
    return LanguageInfo(id=lang_id, extensions=_get_str_list(lang, "extensions"))


def _parse_requirements(meta: Dict[str, Any]) -> Optional[RequirementsInfo]:
    req = _get_table(meta, "requirements")
    if req is None:
        return None
    return RequirementsInfo(
        os=_get_str(req, "os"),
        arch=_get_str(req, "arch"),
        notes=_get_str(req, "notes"),
    )


def _parse_capabilities(meta: Dict[str, Any]) -> List[CapabilityDeclaration]:
    capabilities = []
    for item in _get_table_list(meta, "capabilities"):
        protocol = _get_str(item, "protocol")
        if protocol is None:
            continue
        capabilities.append(
            CapabilityDeclaration(
                protocol=protocol,
                version=_get_str(item, "version") or DEFAULT_DECLARATION_VERSION,
                description=_get_str(item, "description") or "",
            )
        )
    return capabilities
