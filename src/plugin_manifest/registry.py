# -*- coding: utf-8 -*-
"""
插件清单注册表

宿主侧的清单目录：登记单插件清单与展开后的包清单，提供按服务、能力、
类型的查询，以及跨清单的依赖分析与加载顺序计算。

注册表是可变对象，非线程安全；清单本身不可变，可在线程间共享。
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import networkx as nx
from packaging import version

from .exceptions import CircularDependencyError, ManifestError
from .manifest import Manifest, ManifestValidator
from .package import PackageManifest
from .plugin import PluginManifest

# 目录扫描时识别的清单文件名
MANIFEST_FILENAMES = ("plugin.toml", "package.toml")


class ManifestRegistry:
    """
    插件清单注册表

    负责清单的注册、查询与依赖分析。
    """

    def __init__(self):
        """初始化注册表"""
        self.logger = logging.getLogger(__name__)

        # 清单存储，保持注册顺序
        self._manifests: Dict[str, PluginManifest] = {}

        # 索引
        self._by_type: Dict[str, Set[str]] = defaultdict(set)
        self._providers: Dict[str, Set[str]] = defaultdict(set)  # service -> plugins
        self._capabilities: Dict[str, Set[str]] = defaultdict(set)  # protocol -> plugins

        # 来源路径
        self._source_paths: Dict[str, Path] = {}

    def register(
        self,
        manifest: Union[Manifest, PluginManifest, PackageManifest],
        source_path: Optional[Path] = None,
    ) -> List[str]:
        """
        注册清单，包清单先展开再逐个注册

        Args:
            manifest: 统一清单、单插件清单或包清单
            source_path: 清单来源路径

        Returns:
            注册的插件 ID 列表
        """
        if isinstance(manifest, Manifest):
            manifests = manifest.expand()
        elif isinstance(manifest, PackageManifest):
            manifests = manifest.expand_plugins()
        else:
            manifests = [manifest]

        registered = []
        for plugin_manifest in manifests:
            plugin_id = plugin_manifest.plugin.id
            if plugin_id in self._manifests:
                existing = self._manifests[plugin_id]
                self.logger.warning(
                    f"插件 {plugin_id} 已存在 (版本: {existing.plugin.version}), "
                    f"将被替换为新版本 {plugin_manifest.plugin.version}"
                )
                self._unregister(plugin_id)

            self._manifests[plugin_id] = plugin_manifest
            self._by_type[plugin_manifest.plugin.plugin_type].add(plugin_id)
            for service in plugin_manifest.provides:
                self._providers[service.id].add(plugin_id)
            for capability in plugin_manifest.capabilities:
                self._capabilities[capability.protocol].add(plugin_id)
            if source_path:
                self._source_paths[plugin_id] = Path(source_path)

            self.logger.info(f"插件 {plugin_id} v{plugin_manifest.plugin.version} 注册成功")
            registered.append(plugin_id)

        return registered

    def register_from_directory(self, directory: Path, recursive: bool = True) -> int:
        """
        扫描目录中的 plugin.toml / package.toml 并注册

        无法加载的清单记录错误后跳过。

        Args:
            directory: 插件目录
            recursive: 是否递归扫描

        Returns:
            成功注册的插件数量
        """
        directory = Path(directory)
        if not directory.is_dir():
            self.logger.error(f"插件目录不存在: {directory}")
            return 0

        manifest_files: List[Path] = []
        for filename in MANIFEST_FILENAMES:
            if recursive:
                manifest_files.extend(sorted(directory.rglob(filename)))
            else:
                manifest_files.extend(sorted(directory.glob(f"*/{filename}")))

        self.logger.info(f"在 {directory} 中找到 {len(manifest_files)} 个清单文件")

        registered_count = 0
        for manifest_file in manifest_files:
            try:
                manifest = ManifestValidator.load_from_file(manifest_file)
            except ManifestError as e:
                self.logger.error(f"加载清单失败 {manifest_file}: {e}")
                continue
            registered_count += len(self.register(manifest, manifest_file.parent))

        self.logger.info(f"从 {directory} 成功注册了 {registered_count} 个插件")
        return registered_count

    def unregister(self, plugin_id: str) -> bool:
        """注销插件，插件不存在时返回 False"""
        if plugin_id not in self._manifests:
            self.logger.warning(f"尝试注销不存在的插件: {plugin_id}")
            return False

        self._unregister(plugin_id)
        self.logger.info(f"插件 {plugin_id} 注销成功")
        return True

    def get_manifest(self, plugin_id: str) -> Optional[PluginManifest]:
        """获取插件清单"""
        return self._manifests.get(plugin_id)

    def has_plugin(self, plugin_id: str) -> bool:
        """检查插件是否存在"""
        return plugin_id in self._manifests

    def get_source_path(self, plugin_id: str) -> Optional[Path]:
        """获取插件清单的来源目录"""
        return self._source_paths.get(plugin_id)

    def list_plugins(self, plugin_type: Optional[str] = None) -> List[str]:
        """按注册顺序列出插件，可按类型筛选"""
        if plugin_type:
            members = self._by_type.get(plugin_type, set())
            return [pid for pid in self._manifests if pid in members]
        return list(self._manifests.keys())

    def get_plugins_by_service(self, service_id: str) -> List[str]:
        """获取提供指定服务的插件"""
        return sorted(self._providers.get(service_id, set()))

    def get_plugins_by_capability(self, protocol: str) -> List[str]:
        """获取声明指定能力协议的插件"""
        return sorted(self._capabilities.get(protocol, set()))

    def get_plugin_dependencies(self, plugin_id: str) -> List[str]:
        """获取插件的直接依赖"""
        manifest = self.get_manifest(plugin_id)
        return list(manifest.compatibility.depends_on) if manifest else []

    def get_plugin_dependents(self, plugin_id: str) -> List[str]:
        """获取依赖于指定插件的其他插件"""
        return [
            pid
            for pid, manifest in self._manifests.items()
            if plugin_id in manifest.compatibility.depends_on
        ]

    def find_missing_dependencies(self) -> Dict[str, List[str]]:
        """
        找出未注册的依赖

        Returns:
            {plugin_id: [缺失的依赖 ID]}，只包含存在缺失依赖的插件
        """
        report = {}
        for plugin_id, manifest in self._manifests.items():
            missing = [d for d in manifest.compatibility.depends_on if d not in self._manifests]
            if missing:
                report[plugin_id] = missing
        return report

    def load_order(self, plugin_ids: Optional[Iterable[str]] = None) -> List[str]:
        """
        计算加载顺序，依赖先于依赖方

        未注册的依赖不参与排序。

        Args:
            plugin_ids: 目标插件，默认全部已注册插件；其依赖会被一并纳入

        Returns:
            按依赖顺序排列的插件 ID

        Raises:
            CircularDependencyError: 存在循环依赖
        """
        targets = list(self._manifests) if plugin_ids is None else list(plugin_ids)
        graph = self._build_dependency_graph(self._collect_dependencies(targets))

        try:
            order = list(nx.topological_sort(graph))
        except nx.NetworkXUnfeasible as e:
            cycle = nx.find_cycle(graph)
            raise CircularDependencyError(cycle[-1][1]) from e

        self.logger.debug(f"加载顺序: {order}")
        return order

    def check_requirements(self) -> Dict[str, List[str]]:
        """
        检查所有插件的服务依赖是否满足

        非可选依赖必须有插件提供；声明 min_version 时，至少一个提供方的
        服务版本不低于该版本。

        Returns:
            {plugin_id: [错误信息]}，只包含存在问题的插件
        """
        report = {}
        for plugin_id, manifest in self._manifests.items():
            errors = []
            for requirement in manifest.requires:
                offered = self._offered_versions(requirement.id)
                if not offered:
                    if not requirement.optional:
                        errors.append(f"缺少服务: {requirement.id}")
                    continue
                if requirement.min_version is None:
                    continue

                try:
                    minimum = version.parse(requirement.min_version)
                    satisfied = any(version.parse(v) >= minimum for v in offered)
                except version.InvalidVersion as e:
                    errors.append(f"服务版本验证失败: {requirement.id} - {e}")
                    continue

                if not satisfied and not requirement.optional:
                    errors.append(
                        f"服务版本不匹配: 需要 {requirement.id} >= {requirement.min_version}, "
                        f"但找到 {', '.join(offered)}"
                    )
            if errors:
                report[plugin_id] = errors
        return report

    def get_statistics(self) -> Dict[str, Any]:
        """获取注册表统计信息"""
        return {
            "total_plugins": len(self._manifests),
            "by_type": {t: len(plugins) for t, plugins in self._by_type.items()},
            "services_provided": len(self._providers),
            "capabilities_provided": len(self._capabilities),
        }

    def clear(self) -> None:
        """清空注册表"""
        self._manifests.clear()
        self._by_type.clear()
        self._providers.clear()
        self._capabilities.clear()
        self._source_paths.clear()

        self.logger.info("注册表已清空")

    def _offered_versions(self, service_id: str) -> List[str]:
        versions = []
        for provider_id in self.get_plugins_by_service(service_id):
            for service in self._manifests[provider_id].provides:
                if service.id == service_id:
                    versions.append(service.version)
        return versions

    def _collect_dependencies(self, plugin_ids: List[str]) -> List[str]:
        """收集目标插件及其传递依赖，保持首次出现顺序"""
        collected: Dict[str, None] = {}
        stack = list(reversed(plugin_ids))
        while stack:
            plugin_id = stack.pop()
            if plugin_id in collected or plugin_id not in self._manifests:
                continue
            collected[plugin_id] = None
            stack.extend(reversed(self._manifests[plugin_id].compatibility.depends_on))
        return list(collected)

    def _build_dependency_graph(self, plugin_ids: List[str]) -> nx.DiGraph:
        """构建依赖图，边从依赖指向依赖方"""
        graph = nx.DiGraph()
        graph.add_nodes_from(plugin_ids)
        for plugin_id in plugin_ids:
            for dep_id in self._manifests[plugin_id].compatibility.depends_on:
                if dep_id in graph:
                    graph.add_edge(dep_id, plugin_id)
        return graph

    def _unregister(self, plugin_id: str) -> None:
        """内部注销方法"""
        manifest = self._manifests.pop(plugin_id)

        plugin_type = manifest.plugin.plugin_type
        self._by_type[plugin_type].discard(plugin_id)
        if not self._by_type[plugin_type]:
            del self._by_type[plugin_type]

        for service in manifest.provides:
            self._providers[service.id].discard(plugin_id)
            if not self._providers[service.id]:
                del self._providers[service.id]

        for capability in manifest.capabilities:
            self._capabilities[capability.protocol].discard(plugin_id)
            if not self._capabilities[capability.protocol]:
                del self._capabilities[capability.protocol]

        self._source_paths.pop(plugin_id, None)
