# -*- coding: utf-8 -*-
"""
平台识别工具测试
"""

from unittest.mock import patch

import pytest

from plugin_manifest.utils.platform import (
    ALL_PLATFORMS,
    current_platform,
    library_filename,
    matches_platform,
)


class TestCurrentPlatform:
    """测试当前平台识别"""

    def test_format(self):
        platform_id = current_platform()
        os_name, _, arch = platform_id.partition("-")
        assert os_name in {"darwin", "linux", "windows", "unknown"}
        assert arch in {"aarch64", "x86_64", "x86", "unknown"}

    @pytest.mark.parametrize("sys_platform,machine,expected", [
        ("darwin", "arm64", "darwin-aarch64"),
        ("linux", "x86_64", "linux-x86_64"),
        ("linux", "aarch64", "linux-aarch64"),
        ("win32", "AMD64", "windows-x86_64"),
        ("win32", "x86", "windows-x86"),
        ("freebsd14", "riscv64", "unknown-unknown"),
    ])
    def test_detection(self, sys_platform, machine, expected):
        with patch("plugin_manifest.utils.platform.sys.platform", sys_platform), \
                patch("plugin_manifest.utils.platform.platform.machine", return_value=machine):
            assert current_platform() == expected


class TestLibraryFilename:
    """测试动态库文件名"""

    @pytest.mark.parametrize("sys_platform,expected", [
        ("darwin", "libmy_plugin.dylib"),
        ("linux", "libmy_plugin.so"),
        ("win32", "my_plugin.dll"),
    ])
    def test_per_platform(self, sys_platform, expected):
        with patch("plugin_manifest.utils.platform.sys.platform", sys_platform):
            assert library_filename("my_plugin") == expected

    def test_contains_base_name(self):
        assert "my_plugin" in library_filename("my_plugin")


class TestMatchesPlatform:
    """测试平台匹配"""

    def test_wildcard(self):
        assert matches_platform(ALL_PLATFORMS) is True
        assert matches_platform("all") is True

    def test_current(self):
        assert matches_platform(current_platform()) is True

    def test_unknown_platform(self):
        assert matches_platform("definitely-not-a-real-platform") is False
