"""编辑器表面: 以 (行, 列) 坐标编辑单个文档"""
from __future__ import annotations

from typing import List, Tuple

from .vault import BaseVault

Position = Tuple[int, int]


def _split_lines(text: str) -> List[str]:
    """只按 \\n 分行并保留行尾; \\r 留在行内, 其它 Unicode 分隔符不算换行"""
    lines = [s + "\n" for s in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    return lines if lines[-1] else lines[:-1]


class DocumentEditor:
    def __init__(self, vault: BaseVault, path: str, cursor: Position = (0, 0)):
        self.vault = vault
        self.path = path
        self.cursor = cursor
        self._lines: List[str] = _split_lines(vault.read(path))
        self.dirty = False

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def text(self) -> str:
        return "".join(self._lines)

    def get_cursor(self) -> Position:
        return self.cursor

    def get_line(self, n: int) -> str:
        """不含换行符"""
        if n < 0 or n >= len(self._lines):
            raise IndexError(f"行号越界: {n} (共 {len(self._lines)} 行)")
        return self._lines[n].rstrip("\r\n")

    def _offset(self, pos: Position) -> int:
        line, ch = pos
        return sum(len(s) for s in self._lines[:line]) + ch

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        full = self.text
        a, b = self._offset(start), self._offset(end)
        self._lines = _split_lines(full[:a] + text + full[b:])
        self.dirty = True

    def save(self) -> bool:
        if not self.dirty:
            return False
        self.vault.modify(self.path, self.text)
        self.dirty = False
        return True
