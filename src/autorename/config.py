"""TOML 配置

配置文件示例 (autorename.toml):

[autorename]
vault = "./"                   # vault 根目录
cursor_strategy = "priority"   # priority | tightest
case_insensitive = false       # 省略时按平台判断
recursive = true
include = ["*.md"]
exclude = ["draft-*.md"]
verbose = true

[plugins]
enabled = []
disabled = ["default_resolver"]
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from .core.links import CURSOR_STRATEGIES

DEFAULT_CONFIG_NAME = "autorename.toml"


@dataclass
class AutoRenameConfig:
    vault: str = "./"
    cursor_strategy: str = "priority"
    case_insensitive: Optional[bool] = None   # None = 按平台判断
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    recursive: bool = False
    verbose: bool = True
    plugins_enabled: List[str] = field(default_factory=list)
    plugins_disabled: List[str] = field(default_factory=list)
    source: Optional[str] = None   # 配置文件路径 (无则为默认值)

    def vault_root(self, base: Path | None = None) -> Path:
        root = Path(self.vault).expanduser()
        if not root.is_absolute():
            root = (base or Path.cwd()) / root
        return root.resolve()


def _as_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class ConfigLoader:
    @staticmethod
    def load(path: str | Path) -> AutoRenameConfig:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"配置文件不存在: {p}")
        data = tomllib.loads(p.read_text(encoding="utf-8"))

        raw = data.get("autorename", {})
        plugins_raw = data.get("plugins", {})
        strategy = raw.get("cursor_strategy", "priority")
        if strategy not in CURSOR_STRATEGIES:
            raise ValueError(f"cursor_strategy 取值无效: {strategy} (可选 {', '.join(CURSOR_STRATEGIES)})")
        case_insensitive = raw.get("case_insensitive")
        if case_insensitive is not None:
            case_insensitive = bool(case_insensitive)

        # 相对 vault 路径以配置文件所在目录为基准
        vault = str(raw.get("vault", "./"))
        if not Path(vault).expanduser().is_absolute():
            vault = str((p.parent / vault).resolve())

        return AutoRenameConfig(
            vault=vault,
            cursor_strategy=strategy,
            case_insensitive=case_insensitive,
            include=_as_list(raw.get("include") or raw.get("includes")),
            exclude=_as_list(raw.get("exclude") or raw.get("excludes")),
            recursive=bool(raw.get("recursive", False)),
            verbose=bool(raw.get("verbose", True)),
            plugins_enabled=_as_list(plugins_raw.get("enabled")),
            plugins_disabled=_as_list(plugins_raw.get("disabled")),
            source=str(p),
        )

    @staticmethod
    def discover(path: str | Path | None = None, cwd: Path | None = None) -> AutoRenameConfig:
        """显式路径 > 当前目录下的 autorename.toml > 默认值"""
        if path:
            return ConfigLoader.load(path)
        candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
        if candidate.is_file():
            return ConfigLoader.load(candidate)
        return AutoRenameConfig()


__all__ = ["AutoRenameConfig", "ConfigLoader", "DEFAULT_CONFIG_NAME"]
