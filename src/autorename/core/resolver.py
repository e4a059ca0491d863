"""链接 -> vault 文件解析

顺序 (先成功者生效):
  1. 去别名并 trim，空串 -> UnresolvableLink
  2. scheme:// 外链 -> ExternalLink
  3. oracle(link, source_path)
  4. 候选路径: 原样 / 源文档文件夹相对 / 去掉开头的单个 /
  5. 全部失败 -> FileNotFound
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from .errors import ExternalLinkError, ImageNotFoundError, UnresolvableLinkError
from .paths import is_external, join_path, parent_folder
from .vault import BaseVault, StoredFile

logger = logging.getLogger(__name__)

Oracle = Callable[[str, str], Optional[StoredFile]]


@dataclass(frozen=True)
class ResolvedTarget:
    file: StoredFile
    link: str   # 去别名后的链接文本

    @property
    def stored_path(self) -> str:
        return self.file.path

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def extension(self) -> str:
        return self.file.extension

    @property
    def modified_at(self) -> datetime:
        """本地时区的修改时间"""
        return datetime.fromtimestamp(self.file.mtime)


def strip_link(raw_link: str) -> str:
    return raw_link.split("|")[0].strip()


def fallback_candidates(link: str, source_path: str) -> List[str]:
    folder = parent_folder(source_path)
    return [
        link,
        join_path(folder, link),
        link[1:] if link.startswith("/") else link,
    ]


class PathResolver:
    def __init__(self, vault: BaseVault, oracle: Optional[Oracle] = None):
        self.vault = vault
        self.oracle = oracle

    def resolve(self, raw_link: str, source_path: str) -> ResolvedTarget:
        link = strip_link(raw_link)
        if not link:
            raise UnresolvableLinkError("无法解析图片路径", link=raw_link)
        if is_external(link):
            raise ExternalLinkError(f"外部图片无法重命名: {link}", link=link)

        if self.oracle is not None:
            hit = self.oracle(link, source_path)
            # oracle 结果以 vault 当前状态为准
            found = self.vault.get_file(hit.path) if hit is not None else None
            if found is not None:
                return ResolvedTarget(file=found, link=link)

        for cand in fallback_candidates(link, source_path):
            found = self.vault.get_file(cand)
            if found is not None:
                logger.debug("候选路径命中: %s -> %s", link, found.path)
                return ResolvedTarget(file=found, link=link)

        raise ImageNotFoundError(f"未找到图片文件: {link}", link=link)


__all__ = ["Oracle", "ResolvedTarget", "PathResolver", "strip_link", "fallback_candidates"]
