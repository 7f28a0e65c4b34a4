# -*- coding: utf-8 -*-
"""
全局测试配置
提供共享的清单文本与 fixture
"""

from pathlib import Path

import pytest

from plugin_manifest import PackageManifest, PluginManifest

MINIMAL_PLUGIN_TOML = """
[plugin]
id = "vendor.minimal"
name = "Minimal"
version = "0.1.0"
type = "extension"
"""

FULL_PLUGIN_TOML = """
[plugin]
id = "vendor.test-plugin"
name = "Test Plugin"
version = "1.0.0"
type = "extension"
author = "Test Author"
description = "A plugin used in tests"
license = "MIT"
homepage = "https://example.com"

[compatibility]
api_version = 1
min_host_version = "0.8.0"
platforms = ["darwin-aarch64", "linux-x86_64"]
depends_on = ["vendor.base"]

[binary]
name = "test_plugin"

[binary.checksums]
darwin-aarch64 = "sha256:abc123"
linux-x86_64 = "sha256:def456"

[signature]
public_key = "bXlrZXk="
signature_file = "plugin.sig"

[config.defaults]
enabled = true
level = 3
endpoint = "${PLUGIN_ENDPOINT}"

[cli]
command = "tasks"
description = "Task management"
aliases = ["t"]

[[provides]]
id = "vendor.tasks.cli"
version = "1.0.0"
description = "CLI commands"

[[requires]]
id = "vendor.storage"
min_version = "2.0.0"

[[requires]]
id = "vendor.telemetry"
optional = true

[[capabilities]]
protocol = "tasks"
version = "1.0.0"
description = "Task management API"

[tags]
categories = ["tasks", "workflow"]

[requirements]
os = "linux"
notes = "needs docker"
"""

THEME_PACKAGE_TOML = """
[package]
id = "vendor.theme-pack"
name = "Theme Collection"
version = "2.0.0"
author = "Vendor Team"
description = "A collection of themes"
license = "MIT"

[compatibility]
api_version = 1
min_host_version = "0.8.0"
depends_on = ["vendor.theme-engine"]

[[plugins]]
id = "vendor.theme-dark"
name = "Dark Theme"
type = "theme"
binary = "dark_theme"

[[plugins]]
id = "vendor.theme-light"
name = "Light Theme"
type = "theme"
binary = "light_theme"
description = "Bright and clean"

[[plugins]]
id = "vendor.theme-custom"
name = "Custom Theme Builder"
type = "extension"
binary = "custom_builder"
depends_on = ["vendor.theme-dark"]

[plugins.config.defaults]
accent = "blue"

[[plugins.provides]]
id = "vendor.theme.builder"
version = "1.2.0"

[binary.checksums]
darwin-aarch64 = "sha256:abc123"

[signature]
public_key = "cGFja2tleQ=="
signature_file = "package.sig"
"""


@pytest.fixture
def minimal_manifest():
    """最小单插件清单"""
    return PluginManifest.from_toml(MINIMAL_PLUGIN_TOML)


@pytest.fixture
def full_manifest():
    """包含所有可选段的单插件清单"""
    return PluginManifest.from_toml(FULL_PLUGIN_TOML)


@pytest.fixture
def theme_package():
    """示例多插件包清单"""
    return PackageManifest.from_toml(THEME_PACKAGE_TOML)


@pytest.fixture
def write_file(tmp_path):
    """在临时目录中写入文件并返回路径"""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def minimal_plugin_toml():
    return MINIMAL_PLUGIN_TOML


@pytest.fixture
def full_plugin_toml():
    return FULL_PLUGIN_TOML


@pytest.fixture
def theme_package_toml():
    return THEME_PACKAGE_TOML
