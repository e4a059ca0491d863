"""重命名编排: 单链接模式 / 整篇批量模式

单链接: 解析 -> 生成新名 (当前时间) -> 重命名 -> 改写光标所在链接
批量:   扫描全文 -> 解析并按文件去重 -> 生成新名 (图片修改时间)
        -> 逐个重命名 (失败不影响其余) -> 仅对成功项改写全文 -> 一次写回
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Tuple

from . import naming
from .editor import DocumentEditor
from .errors import (
    RESOLUTION_ERRORS,
    AutoRenameError,
    NoActiveDocumentError,
    NoImagesFoundError,
    NoLinkAtCursorError,
)
from .links import LinkKind, LinkOccurrence, find_all, find_at_cursor
from .notify import Notifier
from .paths import canonical_key
from .resolver import PathResolver, ResolvedTarget
from .rewriter import RewriteMapping, Span, build_link, rewrite_document
from .vault import BaseVault

logger = logging.getLogger(__name__)


@dataclass
class RenameTask:
    target: ResolvedTarget
    new_path: str
    kind: LinkKind
    spans: Set[Span] = field(default_factory=set)   # 解析到该文件的链接区间

    @property
    def is_noop(self) -> bool:
        return self.new_path == self.target.stored_path

    def mapping(self, succeeded: bool) -> RewriteMapping:
        return RewriteMapping(
            old_path=self.target.stored_path,
            new_path=self.new_path,
            kind=self.kind,
            spans=frozenset(self.spans),
            succeeded=succeeded,
        )


@dataclass
class RenameItemResult:
    task: RenameTask
    ok: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass
class BatchRenameResult:
    document: Optional[str]
    items: List[RenameItemResult] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)   # (raw_link, error_kind)
    original: str = ""
    content: str = ""
    replacements: int = 0
    dry_run: bool = False
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @property
    def renamed_count(self) -> int:
        return sum(1 for it in self.items if it.ok and not it.task.is_noop)

    @property
    def failed_count(self) -> int:
        return sum(1 for it in self.items if not it.ok)

    @property
    def changed(self) -> bool:
        return self.content != self.original


@dataclass
class SingleRenameResult:
    ok: bool
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


class ImageRenamer:
    def __init__(
        self,
        vault: BaseVault,
        resolver: Optional[PathResolver] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = datetime.now,
        cursor_strategy: str = "priority",
    ):
        self.vault = vault
        self.resolver = resolver or PathResolver(vault)
        self.notifier = notifier or Notifier()
        self.clock = clock
        self.cursor_strategy = cursor_strategy

    # ---- 单链接模式 ----

    def rename_at_cursor(self, editor: DocumentEditor) -> SingleRenameResult:
        line_no, ch = editor.get_cursor()
        occ = None
        if 0 <= line_no < editor.line_count:
            occ = find_at_cursor(editor.get_line(line_no), ch, self.cursor_strategy)
        if occ is None:
            err = NoLinkAtCursorError(f"光标处没有图片链接: {line_no}:{ch}")
            self.notifier.error(str(err))
            return SingleRenameResult(ok=False, error=str(err), error_kind=err.kind)
        return self.rename_occurrence(editor, line_no, occ)

    def rename_occurrence(self, editor: DocumentEditor, line_no: int, occ: LinkOccurrence) -> SingleRenameResult:
        """失败时不改动任何内容"""
        old_path = None
        try:
            target = self.resolver.resolve(occ.raw_link, editor.path)
            old_path = target.stored_path
            new_name = naming.generate(naming.doc_base(editor.path), self.clock(), target.extension)
            new_path = naming.sibling_path(target.stored_path, new_name)
            if new_path != target.stored_path:
                self.vault.rename(target.file, new_path)
        except (AutoRenameError, OSError) as e:
            kind = getattr(e, "kind", type(e).__name__)
            self.notifier.error(f"AutoRename failed: {e}")
            return SingleRenameResult(ok=False, old_path=old_path, error=str(e), error_kind=kind)

        editor.replace_range(build_link(occ, new_path), (line_no, occ.start), (line_no, occ.end))
        try:
            editor.save()
        except OSError as e:
            logger.error("写回文档失败 %s: %s", editor.path, e)
            msg = f"图片已重命名为 {new_path}，但文档写回失败: {e}"
            self.notifier.error(f"AutoRename failed: {msg}")
            return SingleRenameResult(
                ok=False, old_path=old_path, new_path=new_path, error=msg, error_kind=type(e).__name__,
            )
        self.notifier.success(f"图片已重命名为: {new_name}")
        return SingleRenameResult(ok=True, old_path=old_path, new_path=new_path)

    # ---- 批量模式 ----

    def plan_batch(self, doc_path: str, content: str) -> Tuple[List[RenameTask], List[Tuple[str, str]]]:
        """解析全文链接并按文件去重，每个文件一个任务"""
        doc_base = naming.doc_base(doc_path)
        tasks: Dict[str, RenameTask] = {}
        skipped: List[Tuple[str, str]] = []
        for occ in find_all(content):
            try:
                target = self.resolver.resolve(occ.raw_link, doc_path)
            except RESOLUTION_ERRORS as e:
                logger.debug("跳过链接 %r: %s", occ.raw_link, e.kind)
                skipped.append((occ.raw_link, e.kind))
                continue
            key = canonical_key(target.stored_path, self.vault.case_insensitive)
            task = tasks.get(key)
            if task is None:
                new_name = naming.generate(doc_base, target.modified_at, target.extension)
                task = RenameTask(
                    target=target,
                    new_path=naming.sibling_path(target.stored_path, new_name),
                    kind=occ.kind,
                )
                tasks[key] = task
            task.spans.add((occ.start, occ.end))
        return list(tasks.values()), skipped

    def _execute(self, task: RenameTask, dry_run: bool) -> RenameItemResult:
        if dry_run or task.is_noop:
            return RenameItemResult(task=task, ok=True)
        try:
            self.vault.rename(task.target.file, task.new_path)
        except (AutoRenameError, OSError) as e:
            kind = getattr(e, "kind", type(e).__name__)
            logger.error("rename fail %s -> %s: %s", task.target.stored_path, task.new_path, e)
            self.notifier.error(f"重命名失败: {task.target.name}")
            return RenameItemResult(task=task, ok=False, error=str(e), error_kind=kind)
        return RenameItemResult(task=task, ok=True)

    def rename_all(self, doc_path: Optional[str], dry_run: bool = False) -> BatchRenameResult:
        if not doc_path or self.vault.get_file(doc_path) is None:
            err = NoActiveDocumentError("当前没有打开 Markdown 文档")
            self.notifier.error(str(err))
            return BatchRenameResult(document=doc_path, dry_run=dry_run, error_kind=err.kind)

        content = self.vault.read(doc_path)
        result = BatchRenameResult(document=doc_path, original=content, content=content, dry_run=dry_run)
        tasks, result.skipped = self.plan_batch(doc_path, content)
        if not tasks:
            err = NoImagesFoundError("未在文档中找到可重命名的本地图片")
            self.notifier.error(str(err))
            result.error_kind = err.kind
            return result

        # 严格顺序执行
        for task in tasks:
            result.items.append(self._execute(task, dry_run))

        mappings = [it.task.mapping(it.ok) for it in result.items]
        result.content, result.replacements = rewrite_document(content, mappings)
        if dry_run:
            self.notifier.info(f"[dry-run] 将重命名 {result.renamed_count} 个图片")
            return result
        if result.changed:
            self.vault.modify(doc_path, result.content)
        self.notifier.success(f"已重命名 {result.renamed_count} 个图片并更新文档链接")
        return result


__all__ = [
    "RenameTask",
    "RenameItemResult",
    "BatchRenameResult",
    "SingleRenameResult",
    "ImageRenamer",
]
