"""插件系统 - 基于 pluggy 的链接解析 oracle

解析器先询问已注册插件 (firstresult)，都返回 None 时才走本地候选路径。
第三方插件通过 entry point 组 ``autorename`` 注册。
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from pluggy import HookimplMarker, HookspecMarker, PluginManager

from .paths import canonical_key, join_path, parent_folder
from .vault import BaseVault, StoredFile

hookspec = HookspecMarker("autorename")
hookimpl = HookimplMarker("autorename")

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "autorename"


class AutoRenameSpec:
    """autorename 插件规范"""

    @hookspec(firstresult=True)
    def autorename_resolve_link(self, link: str, source_path: str, vault: BaseVault) -> Optional[StoredFile]:
        """把链接文本解析为 vault 中的文件

        Args:
            link: 去掉别名后的链接
            source_path: 引用该链接的文档 vault 路径
            vault: 存储层

        Returns:
            命中的 StoredFile；无法解析时返回 None 交给下一个插件
        """


class DefaultLinkResolver:
    """内置解析: 源文件夹相对 -> vault 路径 -> 路径后缀匹配"""

    @hookimpl(trylast=True)
    def autorename_resolve_link(self, link: str, source_path: str, vault: BaseVault) -> Optional[StoredFile]:
        target = link.split("#", 1)[0].strip()
        if not target:
            return None
        folder = parent_folder(source_path)
        for cand in (join_path(folder, target), target):
            found = vault.get_file(cand)
            if found:
                return found
        ci = vault.case_insensitive
        key = canonical_key(target, ci)
        if not key or key.startswith(".."):
            return None
        matches = [
            f for f in vault.iter_files()
            if canonical_key(f.path, ci) == key or canonical_key(f.path, ci).endswith("/" + key)
        ]
        if not matches:
            return None
        # 同文件夹优先，其次路径最短
        return min(matches, key=lambda f: (parent_folder(f.path) != folder, len(f.path), f.path))


class PluginRegistry:
    """插件注册表管理器"""

    def __init__(self):
        self._pm = PluginManager("autorename")
        self._pm.add_hookspecs(AutoRenameSpec)
        self._known: Dict[str, Any] = {}
        self._origins: Dict[str, str] = {}  # name -> builtin|entry_point
        self._disabled: set[str] = set()

    def register(self, plugin: Any, name: str, origin: str = "builtin") -> None:
        if self._pm.has_plugin(name):
            return
        self._pm.register(plugin, name=name)
        self._known[name] = plugin
        self._origins[name] = origin
        logger.debug("注册插件: %s (%s)", name, origin)

    def discover_plugins(self) -> int:
        """通过 entry point 发现第三方插件"""
        before = {n for n, _ in self._pm.list_name_plugin()}
        try:
            self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception as e:
            logger.warning("entry point 插件加载失败: %s", e)
            return 0
        added = 0
        for name, plugin in self._pm.list_name_plugin():
            if name not in before:
                self._known[name] = plugin
                self._origins[name] = "entry_point"
                added += 1
        return added

    def list_plugins(self) -> List[str]:
        return sorted(self._known)

    def list_plugins_status(self) -> List[Dict[str, Any]]:
        """列出插件的状态与来源"""
        return [
            {"name": n, "enabled": self.has_plugin(n), "origin": self._origins.get(n, "unknown")}
            for n in self.list_plugins()
        ]

    def has_plugin(self, name: str) -> bool:
        return self._pm.has_plugin(name)

    def is_disabled(self, name: str) -> bool:
        return name in self._disabled

    def disable(self, name: str) -> bool:
        """禁用插件: 从 pluggy 注销并记录禁用集"""
        if name not in self._known:
            return False
        if self._pm.has_plugin(name):
            self._pm.unregister(name=name)
        self._disabled.add(name)
        return True

    def enable(self, name: str) -> bool:
        """启用插件: 从保存源重新注册"""
        plugin = self._known.get(name)
        if plugin is None:
            return False
        if not self._pm.has_plugin(name):
            self._pm.register(plugin, name=name)
        self._disabled.discard(name)
        return True

    def get_origin(self, name: str) -> str:
        return self._origins.get(name, "unknown")

    def resolve_link(self, link: str, source_path: str, vault: BaseVault) -> Optional[StoredFile]:
        return self._pm.hook.autorename_resolve_link(link=link, source_path=source_path, vault=vault)


class LinkOracle:
    """把插件注册表包装成解析器需要的 oracle(link, source_path)"""

    def __init__(self, registry: PluginRegistry, vault: BaseVault):
        self.registry = registry
        self.vault = vault

    def __call__(self, link: str, source_path: str) -> Optional[StoredFile]:
        found = self.registry.resolve_link(link, source_path, self.vault)
        return found if isinstance(found, StoredFile) else None


def create_registry(
    enabled: Iterable[str] = (),
    disabled: Iterable[str] = (),
    discover: bool = True,
) -> PluginRegistry:
    """初始化插件系统: 内置插件 + entry point 插件 + 配置开关"""
    registry = PluginRegistry()
    registry.register(DefaultLinkResolver(), name="default_resolver")
    if discover:
        registry.discover_plugins()
    for n in enabled:
        registry.enable(n)
    for n in disabled:
        registry.disable(n)
    logger.info("插件系统初始化完成，共 %d 个插件", len(registry.list_plugins()))
    return registry


__all__ = [
    "hookimpl",
    "hookspec",
    "AutoRenameSpec",
    "DefaultLinkResolver",
    "PluginRegistry",
    "LinkOracle",
    "create_registry",
    "ENTRY_POINT_GROUP",
]
