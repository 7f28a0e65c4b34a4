# -*- coding: utf-8 -*-
"""
平台识别与动态库文件名工具

平台标识形如 "darwin-aarch64"、"linux-x86_64"，与清单中
`compatibility.platforms` 和 `binary.checksums` 的键保持一致。
"""

import platform
import sys

# 通配平台标识，匹配任何平台
ALL_PLATFORMS = "all"

_ARCH_ALIASES = {
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x86": "x86",
    "i386": "x86",
    "i686": "x86",
}


def _current_os() -> str:
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return "unknown"


def _current_arch() -> str:
    return _ARCH_ALIASES.get(platform.machine().lower(), "unknown")


def current_platform() -> str:
    """
    获取当前平台标识

    Returns:
        "<os>-<arch>" 格式的字符串，os 取 darwin/linux/windows/unknown，
        arch 取 aarch64/x86_64/x86/unknown
    """
    return f"{_current_os()}-{_current_arch()}"


def library_filename(name: str) -> str:
    """
    获取当前平台上的动态库文件名

    非 Windows 平台添加 "lib" 前缀；扩展名依次为 dylib (macOS)、
    dll (Windows)、so (其他)。

    Args:
        name: 不带前缀和扩展名的二进制名称

    Returns:
        平台相关的库文件名
    """
    os_name = _current_os()
    prefix = "" if os_name == "windows" else "lib"

    if os_name == "darwin":
        ext = "dylib"
    elif os_name == "windows":
        ext = "dll"
    else:
        ext = "so"

    return f"{prefix}{name}.{ext}"


def matches_platform(platform_id: str) -> bool:
    """检查平台标识是否匹配当前平台或通配符 "all" """
    return platform_id == current_platform() or platform_id == ALL_PLATFORMS
