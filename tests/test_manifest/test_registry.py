# -*- coding: utf-8 -*-
"""
插件清单注册表测试
"""

import pytest

from plugin_manifest import (
    CircularDependencyError,
    CompatibilityInfo,
    Manifest,
    ManifestRegistry,
    PluginManifest,
    PluginMeta,
    ServiceDeclaration,
    ServiceRequirement,
)


def make_manifest(plugin_id, depends_on=(), provides=(), requires=(), plugin_type="extension"):
    return PluginManifest(
        plugin=PluginMeta(id=plugin_id, name=plugin_id, version="1.0.0", plugin_type=plugin_type),
        compatibility=CompatibilityInfo(depends_on=list(depends_on)),
        provides=list(provides),
        requires=list(requires),
    )


class TestManifestRegistry:
    """测试注册与查询"""

    @pytest.fixture
    def registry(self):
        return ManifestRegistry()

    def test_register_single(self, registry, full_manifest):
        assert registry.register(full_manifest) == ["vendor.test-plugin"]
        assert registry.has_plugin("vendor.test-plugin")
        assert registry.get_manifest("vendor.test-plugin") is full_manifest

    def test_register_package_expands(self, registry, theme_package):
        registered = registry.register(theme_package)

        assert registered == ["vendor.theme-dark", "vendor.theme-light", "vendor.theme-custom"]
        assert registry.get_manifest("vendor.theme-dark").plugin.version == "2.0.0"

    def test_register_unified_manifest(self, registry, theme_package_toml):
        registry.register(Manifest.from_toml(theme_package_toml))
        assert registry.list_plugins(plugin_type="theme") == ["vendor.theme-dark", "vendor.theme-light"]

    def test_register_replaces_existing(self, registry):
        registry.register(make_manifest("vendor.a", provides=[ServiceDeclaration(id="svc", version="1.0.0")]))
        registry.register(make_manifest("vendor.a"))

        assert registry.list_plugins() == ["vendor.a"]
        assert registry.get_plugins_by_service("svc") == []

    def test_unregister(self, registry, full_manifest):
        registry.register(full_manifest)

        assert registry.unregister("vendor.test-plugin") is True
        assert registry.has_plugin("vendor.test-plugin") is False
        assert registry.get_plugins_by_capability("tasks") == []
        assert registry.unregister("vendor.test-plugin") is False

    def test_service_and_capability_lookup(self, registry, full_manifest):
        registry.register(full_manifest)

        assert registry.get_plugins_by_service("vendor.tasks.cli") == ["vendor.test-plugin"]
        assert registry.get_plugins_by_capability("tasks") == ["vendor.test-plugin"]
        assert registry.get_plugins_by_service("unknown") == []

    def test_dependencies_and_dependents(self, registry):
        registry.register(make_manifest("vendor.core"))
        registry.register(make_manifest("vendor.ui", depends_on=["vendor.core"]))
        registry.register(make_manifest("vendor.db", depends_on=["vendor.core"]))

        assert registry.get_plugin_dependencies("vendor.ui") == ["vendor.core"]
        assert registry.get_plugin_dependents("vendor.core") == ["vendor.ui", "vendor.db"]
        assert registry.get_plugin_dependencies("unknown") == []

    def test_find_missing_dependencies(self, registry):
        registry.register(make_manifest("vendor.a", depends_on=["vendor.b", "external.x"]))
        registry.register(make_manifest("vendor.b"))

        assert registry.find_missing_dependencies() == {"vendor.a": ["external.x"]}

    def test_statistics_and_clear(self, registry, theme_package):
        registry.register(theme_package)
        stats = registry.get_statistics()

        assert stats["total_plugins"] == 3
        assert stats["by_type"] == {"theme": 2, "extension": 1}
        assert stats["services_provided"] == 1

        registry.clear()
        assert registry.list_plugins() == []


class TestRegistryLoadOrder:
    """测试跨清单加载顺序"""

    @pytest.fixture
    def registry(self):
        registry = ManifestRegistry()
        registry.register(make_manifest("vendor.app", depends_on=["vendor.ui", "vendor.db"]))
        registry.register(make_manifest("vendor.ui", depends_on=["vendor.core"]))
        registry.register(make_manifest("vendor.db", depends_on=["vendor.core", "external.x"]))
        registry.register(make_manifest("vendor.core"))
        registry.register(make_manifest("vendor.standalone"))
        return registry

    def test_load_order_all(self, registry):
        order = registry.load_order()
        assert set(order) == {"vendor.app", "vendor.ui", "vendor.db", "vendor.core", "vendor.standalone"}
        assert order.index("vendor.core") < order.index("vendor.ui")
        assert order.index("vendor.core") < order.index("vendor.db")
        assert order.index("vendor.ui") < order.index("vendor.app")
        assert order.index("vendor.db") < order.index("vendor.app")

    def test_load_order_collects_transitive_dependencies(self, registry):
        order = registry.load_order(["vendor.ui"])
        assert order == ["vendor.core", "vendor.ui"]

    def test_load_order_cycle(self):
        registry = ManifestRegistry()
        registry.register(make_manifest("vendor.a", depends_on=["vendor.b"]))
        registry.register(make_manifest("vendor.b", depends_on=["vendor.a"]))

        with pytest.raises(CircularDependencyError) as exc_info:
            registry.load_order()
        assert exc_info.value.plugin_id in {"vendor.a", "vendor.b"}


class TestRequirementCheck:
    """测试服务依赖检查"""

    def test_requirements_satisfied(self):
        registry = ManifestRegistry()
        registry.register(make_manifest("vendor.store", provides=[ServiceDeclaration(id="storage", version="2.3.0")]))
        registry.register(
            make_manifest("vendor.app", requires=[ServiceRequirement(id="storage", min_version="2.0.0")])
        )
        assert registry.check_requirements() == {}

    def test_missing_required_service(self):
        registry = ManifestRegistry()
        registry.register(
            make_manifest(
                "vendor.app",
                requires=[
                    ServiceRequirement(id="storage"),
                    ServiceRequirement(id="metrics", optional=True),
                ],
            )
        )

        report = registry.check_requirements()
        assert list(report) == ["vendor.app"]
        assert len(report["vendor.app"]) == 1
        assert "storage" in report["vendor.app"][0]

    def test_version_too_old(self):
        registry = ManifestRegistry()
        registry.register(make_manifest("vendor.store", provides=[ServiceDeclaration(id="storage", version="1.5.0")]))
        registry.register(
            make_manifest("vendor.app", requires=[ServiceRequirement(id="storage", min_version="2.0.0")])
        )

        report = registry.check_requirements()
        assert "1.5.0" in report["vendor.app"][0]

    def test_invalid_version_reported(self):
        registry = ManifestRegistry()
        registry.register(make_manifest("vendor.store", provides=[ServiceDeclaration(id="storage", version="latest")]))
        registry.register(
            make_manifest("vendor.app", requires=[ServiceRequirement(id="storage", min_version="2.0.0")])
        )

        assert "vendor.app" in registry.check_requirements()


class TestRegisterFromDirectory:
    """测试目录扫描"""

    def test_register_from_directory(self, write_file, tmp_path, full_plugin_toml, theme_package_toml):
        write_file("plugins/tasks/plugin.toml", full_plugin_toml)
        write_file("plugins/themes/package.toml", theme_package_toml)
        write_file("plugins/broken/plugin.toml", "[plugin\n")

        registry = ManifestRegistry()
        count = registry.register_from_directory(tmp_path / "plugins")

        assert count == 4
        assert registry.get_source_path("vendor.test-plugin") == tmp_path / "plugins" / "tasks"

    def test_non_recursive_scan(self, write_file, tmp_path, minimal_plugin_toml):
        write_file("plugins/one/plugin.toml", minimal_plugin_toml)
        write_file("plugins/one/nested/two/plugin.toml", minimal_plugin_toml.replace("vendor.minimal", "vendor.deep"))

        registry = ManifestRegistry()
        assert registry.register_from_directory(tmp_path / "plugins", recursive=False) == 1
        assert registry.list_plugins() == ["vendor.minimal"]

    def test_missing_directory(self, tmp_path):
        assert ManifestRegistry().register_from_directory(tmp_path / "missing") == 0
