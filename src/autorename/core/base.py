"""核心模块基类与通用上下文定义"""
from __future__ import annotations

import difflib
import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator


@dataclass
class ModuleContext:
    root: Path   # vault 根目录
    shared: Dict[str, Any] = field(default_factory=dict)


class BaseModule:
    """所有模块需要继承的基类。

    约定:
      - run(context, config) 为唯一必须实现的接口
      - 不进行交互输入/阻塞式询问
      - 结果写入 context.shared[name] 供调用方读取
    """

    name: str = "base"

    def run(self, context: ModuleContext, config: Dict[str, Any]):  # pragma: no cover - 由子类实现
        raise NotImplementedError

    def _iter_markdown_files(self, path: str | Path, config: Dict[str, Any]) -> Iterator[Path]:
        p = Path(path)
        include = config.get("include") or config.get("includes") or []
        exclude = config.get("exclude") or config.get("excludes") or []
        recursive = bool(config.get("recursive", False))
        # 标准化为列表
        if isinstance(include, str):
            include = [include]
        if isinstance(exclude, str):
            exclude = [exclude]

        def match_patterns(file: Path) -> bool:
            rel = file.name
            if include and not any(fnmatch.fnmatch(rel, pat) for pat in include):
                return False
            if exclude and any(fnmatch.fnmatch(rel, pat) for pat in exclude):
                return False
            return True

        if p.is_file() and p.suffix.lower() == ".md":
            if match_patterns(p):
                yield p
            return
        if p.is_dir():
            iterator = p.rglob("*.md") if recursive or any("**" in pat for pat in include) else p.glob("*.md")
            for f in sorted(iterator):
                if f.is_file() and match_patterns(f):
                    yield f

    @staticmethod
    def _diff(label: str, original: str, new_text: str) -> Dict[str, Any]:
        diff_lines = list(difflib.unified_diff(
            original.splitlines(True), new_text.splitlines(True),
            fromfile=label, tofile=label))
        return {"file": label, "diff": diff_lines[:5000]}  # 防止超大
