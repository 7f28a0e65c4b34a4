# -*- coding: utf-8 -*-
"""
插件清单异常

所有异常均直接抛给调用方，不做重试，也不返回部分结果。
"""

from typing import Optional


class ManifestError(Exception):
    """所有清单相关异常的基类。"""

    pass


# region I/O 与语法异常


class ManifestIOError(ManifestError, OSError):
    """读取或写入清单文件失败时引发。"""

    pass


class TomlParseError(ManifestError, ValueError):
    """清单文本不是合法的 TOML，或字段类型不正确时引发。"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"TOML 解析错误: {message}")


# endregion

# region 语义异常


class InvalidFormatError(ManifestError, ValueError):
    """清单可以解析，但语义上不合法时引发。"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"无效的清单格式: {reason}")


class MissingFieldError(ManifestError):
    """缺少必需字段时引发，携带完整的点分路径（如 "plugin.id"）。"""

    def __init__(self, field_path: str):
        self.field_path = field_path
        super().__init__(f"缺少必需字段: {field_path}")


class InvalidVersionError(ManifestError, ValueError):
    """版本字符串无效时引发（为更严格的语义化版本校验预留）。"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"无效的版本: {value}")


# endregion

# region 依赖异常


class CircularDependencyError(ManifestError):
    """计算安装顺序时检测到循环依赖时引发。"""

    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"检测到循环依赖: {plugin_id}")


# endregion
