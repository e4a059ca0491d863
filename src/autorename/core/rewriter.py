"""链接文本改写

单链接模式: 替换行内 [start, end) 区间为重建后的链接
整篇模式:   基于原文快照一次解析，按映射替换各链接的路径区间，从右向左拼接
            映射带 spans 时按出现位置匹配，否则按旧路径文本匹配
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from .links import LinkKind, LinkOccurrence, find_all

Span = Tuple[int, int]


@dataclass(frozen=True)
class RewriteMapping:
    old_path: str
    new_path: str
    kind: LinkKind
    spans: FrozenSet[Span] = frozenset()   # 原文中解析到该文件的链接区间 (start, end)
    succeeded: bool = True


def build_link(occ: LinkOccurrence, new_path: str) -> str:
    """按原语法重建链接; wiki 保留别名, inline 只换路径"""
    if occ.kind is LinkKind.WIKI:
        alias = f"|{occ.alias}" if occ.alias else ""
        return f"![[{new_path}{alias}]]"
    head = occ.full_text[: occ.path_start - occ.start]
    tail = occ.full_text[occ.path_end - occ.start:]
    return f"{head}{new_path}{tail}"


def rewrite_span(line: str, occ: LinkOccurrence, new_path: str) -> str:
    return line[: occ.start] + build_link(occ, new_path) + line[occ.end:]


def _lookup_tables(mappings: Iterable[RewriteMapping]) -> Tuple[Dict[Span, str], Set[Span], Dict[str, str]]:
    by_span: Dict[Span, str] = {}
    claimed: Set[Span] = set()
    by_path: Dict[str, str] = {}
    for m in mappings:
        # 已登记的区间即使重命名失败也不再按文本匹配
        claimed.update(m.spans)
        # 重命名失败的文件仍在旧路径，不改写
        if not m.succeeded or m.old_path == m.new_path:
            continue
        if m.spans:
            for span in m.spans:
                by_span[span] = m.new_path
        else:
            by_path[m.old_path] = m.new_path
    return by_span, claimed, by_path


def rewrite_document(content: str, mappings: Iterable[RewriteMapping]) -> Tuple[str, int]:
    """返回 (新文本, 替换次数)。

    只替换路径区间，别名/alt/括号保持原样；所有区间都来自原文快照，
    映射顺序不影响结果，新路径也不会被再次匹配。
    同一写法在文中可能指向不同文件，故批量模式按区间登记映射。
    """
    by_span, claimed, by_path = _lookup_tables(mappings)
    if not by_span and not by_path:
        return content, 0
    edits: List[Tuple[int, int, str]] = []
    last_end = -1
    for occ in sorted(find_all(content), key=lambda o: o.start):
        span = (occ.start, occ.end)
        if span in claimed:
            new_path = by_span.get(span)
        else:
            new_path = by_path.get(occ.link)
        if new_path is None or occ.start < last_end:
            continue
        edits.append((occ.path_start, occ.path_end, new_path))
        last_end = occ.end
    text = content
    for start, end, new_path in reversed(edits):
        text = text[:start] + new_path + text[end:]
    return text, len(edits)


__all__ = ["Span", "RewriteMapping", "build_link", "rewrite_span", "rewrite_document"]
