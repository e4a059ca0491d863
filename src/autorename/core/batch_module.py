"""多文档批量重命名模块

对 input 下每个 Markdown 文档执行整篇批量重命名。

可配置:
  input: 文件或目录 (默认 vault 根目录)
  include / exclude / recursive: 继承基础遍历
  verbose: 打印每文件状态
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from .base import BaseModule, ModuleContext
from .renamer import ImageRenamer
from .vault import FileSystemVault


class BatchRenameModule(BaseModule):
    name = "batch_rename"

    def __init__(self, renamer: Optional[ImageRenamer] = None):
        self.renamer = renamer

    def run(self, context: ModuleContext, config: Dict[str, Any]):
        renamer = self.renamer or ImageRenamer(FileSystemVault(context.root))
        input_path = Path(config.get("input", context.root))
        if not input_path.is_absolute():
            input_path = context.root / input_path
        verbose = config.get("verbose", True)
        dry_run = context.shared.get("__dry_run", False)
        diffs: list = []
        details: list = []
        total = changed = renamed = failed = 0
        for file in self._iter_markdown_files(input_path, config):
            try:
                doc_path = file.resolve().relative_to(context.root.resolve()).as_posix()
            except ValueError:
                print(f"[{self.name}] 跳过 vault 外的文件: {file}")
                continue
            total += 1
            result = renamer.rename_all(doc_path, dry_run=dry_run)
            renamed += result.renamed_count
            failed += result.failed_count
            if result.changed:
                changed += 1
                if dry_run:
                    diffs.append(self._diff(doc_path, result.original, result.content))
            if verbose:
                state = "CHANGED" if result.changed else (result.error_kind or "ok")
                print(f"[{self.name}] {state} - {doc_path}")
            details.append({
                "file": doc_path,
                "changed": result.changed,
                "renamed": result.renamed_count,
                "failed": result.failed_count,
                "error": result.error_kind,
            })
        print(f"[{self.name}] files={total} changed={changed} renamed={renamed} failed={failed}{' (dry-run)' if dry_run else ''}")
        context.shared[self.name] = {
            "files": total,
            "changed": changed,
            "renamed": renamed,
            "failed": failed,
            "diffs": diffs,
            "details": details,
        }
