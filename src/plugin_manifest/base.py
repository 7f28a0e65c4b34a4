# -*- coding: utf-8 -*-
"""
清单模型基类

提供基于 Pydantic 的不可变模型，以及 TOML 文本与模型之间的转换：
1. **TOML 解析**：语法错误统一转换为 TomlParseError
2. **必需字段检查**：缺失字段转换为带点分路径的 MissingFieldError
3. **序列化**：省略空的可选字段，输出可再次解析的 TOML 文本
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

import tomli_w
from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import (
    InvalidFormatError,
    ManifestError,
    ManifestIOError,
    MissingFieldError,
    TomlParseError,
)

T = TypeVar("T", bound="ManifestDocument")


class ManifestModel(BaseModel):
    """所有清单结构的基类：构造后不可变，忽略未知字段，字段类型不做隐式转换"""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore", strict=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """转换为以 TOML 键名为键的纯 Python 字典"""
        return self.model_dump(by_alias=True, exclude_none=True)


def translate_validation_error(error: ValidationError) -> ManifestError:
    """
    将 Pydantic 验证错误转换为清单异常

    缺失字段优先报告为 MissingFieldError，其余（类型错误等）报告为
    TomlParseError。

    Args:
        error: Pydantic 验证错误

    Returns:
        对应的清单异常
    """
    for detail in error.errors():
        if detail["type"] == "missing":
            field_path = ".".join(str(part) for part in detail["loc"])
            return MissingFieldError(field_path)
    return TomlParseError(str(error), original_error=error)


def load_toml(content: str) -> Dict[str, Any]:
    """解析 TOML 文本"""
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise TomlParseError(str(e), original_error=e) from e


def read_manifest_text(path: Union[str, Path]) -> str:
    """读取清单文件内容，I/O 错误转换为 ManifestIOError"""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestIOError(f"读取清单文件失败 {path}: {e}") from e


class ManifestDocument(ManifestModel):
    """
    清单文档根模型

    单插件清单与多插件包清单共用的解析、序列化入口。
    """

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        从已解析的字典构造清单

        Raises:
            MissingFieldError: 缺少必需字段
            TomlParseError: 字段类型错误
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise translate_validation_error(e) from e

    @classmethod
    def from_toml(cls: Type[T], content: str) -> T:
        """从 TOML 字符串解析"""
        return cls.from_dict(load_toml(content))

    @classmethod
    def from_file(cls: Type[T], path: Union[str, Path]) -> T:
        """从文件解析"""
        return cls.from_toml(read_manifest_text(path))

    def to_toml(self) -> str:
        """
        序列化为 TOML 字符串

        结果与原始文本不保证逐字节一致，只保证语义一致。

        Raises:
            InvalidFormatError: 序列化失败
        """
        try:
            return tomli_w.dumps(self.to_dict())
        except (TypeError, ValueError) as e:
            raise InvalidFormatError(f"序列化清单失败: {e}") from e
