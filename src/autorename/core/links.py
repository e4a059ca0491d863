"""图片链接识别

支持两种嵌入语法:
  - wiki:   ![[path|alias]]
  - inline: ![alt](path)

扫描结果直接给出各部分的区间 (整体 / 路径)，改写时按区间替换，无需再拼正则。
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class LinkKind(str, Enum):
    WIKI = "wiki"
    INLINE = "inline"


# 路径取到第一个 | 或 ]] 为止；允许为空，由解析器报告 UnresolvableLink
WIKI_RE = re.compile(r'!\[\[(?P<path>[^\]|\n]*)(?:\|(?P<alias>[^\]\n]*))?\]\]')
INLINE_RE = re.compile(r'!\[(?P<alt>[^\]\n]*)\]\((?P<path>[^)\n]*)\)')

CURSOR_STRATEGIES = ("priority", "tightest")


@dataclass(frozen=True)
class LinkOccurrence:
    kind: LinkKind
    raw_link: str
    alias: Optional[str]   # wiki 的别名 / inline 的 alt 文本
    start: int
    end: int
    full_text: str
    path_start: int
    path_end: int

    @property
    def link(self) -> str:
        """去掉别名并 trim 后的链接"""
        return self.raw_link.split("|")[0].strip()

    @property
    def width(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


def iter_wiki(text: str) -> Iterator[LinkOccurrence]:
    for m in WIKI_RE.finditer(text):
        yield LinkOccurrence(
            kind=LinkKind.WIKI,
            raw_link=m.group("path"),
            alias=m.group("alias"),
            start=m.start(),
            end=m.end(),
            full_text=m.group(0),
            path_start=m.start("path"),
            path_end=m.end("path"),
        )


def iter_inline(text: str) -> Iterator[LinkOccurrence]:
    for m in INLINE_RE.finditer(text):
        yield LinkOccurrence(
            kind=LinkKind.INLINE,
            raw_link=m.group("path"),
            alias=m.group("alt"),
            start=m.start(),
            end=m.end(),
            full_text=m.group(0),
            path_start=m.start("path"),
            path_end=m.end("path"),
        )


def find_all(text: str) -> List[LinkOccurrence]:
    """批量模式: 全部 wiki 链接在前，其后为全部 inline 链接"""
    return list(iter_wiki(text)) + list(iter_inline(text))


def find_at_cursor(line: str, ch: int, strategy: str = "priority") -> Optional[LinkOccurrence]:
    """返回光标所在的链接。

    strategy:
      priority  先 wiki 后 inline，各自取最左侧包含光标的一个
      tightest  所有包含光标的链接中区间最短者，长度相同取起点靠前者
    """
    if strategy == "priority":
        for scan in (iter_wiki, iter_inline):
            for occ in scan(line):
                if occ.contains(ch):
                    return occ
        return None
    if strategy == "tightest":
        hits = [occ for occ in find_all(line) if occ.contains(ch)]
        if not hits:
            return None
        return min(hits, key=lambda o: (o.width, o.start))
    raise ValueError(f"未知的光标策略: {strategy}")


__all__ = [
    "LinkKind",
    "LinkOccurrence",
    "WIKI_RE",
    "INLINE_RE",
    "CURSOR_STRATEGIES",
    "iter_wiki",
    "iter_inline",
    "find_all",
    "find_at_cursor",
]
