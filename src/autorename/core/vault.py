"""存储层: vault 抽象与基于本地文件系统的实现

vault 内一律使用相对根目录的 POSIX 路径字符串。
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from .errors import RenameConflictError, RenameFailureError
from .paths import escapes_root, is_case_insensitive_fs, normalize_path, split_ext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    """vault 中的文件句柄"""
    path: str
    mtime: float   # 修改时间 (POSIX 秒)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def basename(self) -> str:
        return split_ext(self.name)[0]

    @property
    def extension(self) -> str:
        """带前导 . 的扩展名，无扩展名时为空串"""
        return split_ext(self.name)[1]


@dataclass(frozen=True)
class StoredFolder:
    path: str


StoredEntry = Union[StoredFile, StoredFolder]


class BaseVault:
    """存储协作方接口。

    约定:
      - lookup 不存在时返回 None
      - rename 目标已存在抛 RenameConflictError，其余失败抛 RenameFailureError
    """

    case_insensitive: bool = False

    def lookup(self, path: str) -> Optional[StoredEntry]:  # pragma: no cover - 由子类实现
        raise NotImplementedError

    def read(self, path: str) -> str:  # pragma: no cover
        raise NotImplementedError

    def modify(self, path: str, text: str) -> None:  # pragma: no cover
        raise NotImplementedError

    def rename(self, file: StoredFile, new_path: str) -> StoredFile:  # pragma: no cover
        raise NotImplementedError

    def iter_files(self) -> Iterator[StoredFile]:  # pragma: no cover
        raise NotImplementedError

    def get_file(self, path: str) -> Optional[StoredFile]:
        """只接受文件，文件夹视为不存在"""
        entry = self.lookup(path)
        return entry if isinstance(entry, StoredFile) else None


class FileSystemVault(BaseVault):
    IGNORE_DIRS = {".git", ".obsidian", ".trash", "__pycache__", "node_modules"}

    def __init__(self, root: str | Path, case_insensitive: bool | None = None):
        self.root = Path(root).resolve()
        if not self.root.is_dir():
            raise NotADirectoryError(f"vault 根目录不存在: {self.root}")
        self.case_insensitive = is_case_insensitive_fs() if case_insensitive is None else case_insensitive

    def _abs(self, path: str) -> Optional[Path]:
        rel = normalize_path(path)
        if escapes_root(rel):
            return None
        return self.root / rel if rel else self.root

    def to_vault_path(self, path: str | Path) -> str:
        """本地路径 (绝对或相对当前目录) 转 vault 路径"""
        p = Path(path)
        if not p.is_absolute():
            p = Path.cwd() / p
        return p.resolve().relative_to(self.root).as_posix()

    def _on_disk(self, rel: str) -> Optional[str]:
        """逐级按目录列表匹配 (精确优先，其次 casefold)，返回磁盘上的实际写法"""
        current = self.root
        parts: list = []
        for part in rel.split("/") if rel else []:
            if not current.is_dir():
                return None
            names = sorted(os.listdir(current))
            if part in names:
                hit = part
            else:
                folded = part.casefold()
                hit = next((n for n in names if n.casefold() == folded), None)
                if hit is None:
                    return None
            parts.append(hit)
            current = current / hit
        return "/".join(parts)

    def lookup(self, path: str) -> Optional[StoredEntry]:
        target = self._abs(path)
        if target is None:
            return None
        rel = normalize_path(path)
        if self.case_insensitive:
            actual = self._on_disk(rel)
            if actual is None:
                return None
            rel = actual
            target = self.root / rel if rel else self.root
        if not target.exists():
            return None
        if target.is_file():
            return StoredFile(path=rel, mtime=target.stat().st_mtime)
        if target.is_dir():
            return StoredFolder(path=rel)
        return None

    def read(self, path: str) -> str:
        target = self._abs(path)
        if target is None:
            raise FileNotFoundError(path)
        # 保留原始换行符 (CRLF 文档写回后不变)
        with open(target, encoding="utf-8", newline="") as f:
            return f.read()

    def modify(self, path: str, text: str) -> None:
        target = self._abs(path)
        if target is None or not target.is_file():
            raise FileNotFoundError(path)
        target.write_text(text, encoding="utf-8", newline="")
        logger.debug("写回文档: %s", path)

    def rename(self, file: StoredFile, new_path: str) -> StoredFile:
        src = self._abs(file.path)
        dst = self._abs(new_path)
        if dst is None:
            raise RenameFailureError(f"目标路径越出 vault: {new_path}", link=file.path)
        if src is None or not src.is_file():
            raise RenameFailureError(f"源文件不存在: {file.path}", link=file.path)
        if src == dst:
            return file
        # 大小写不敏感文件系统上仅大小写变化时 dst 指向同一文件
        if dst.exists() and not src.samefile(dst):
            raise RenameConflictError(f"目标已存在: {new_path}", link=file.path)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            os.rename(src, dst)
        except OSError as e:
            raise RenameFailureError(f"重命名失败: {e}", link=file.path) from e
        logger.info("重命名 %s -> %s", file.path, new_path)
        return StoredFile(path=normalize_path(new_path), mtime=dst.stat().st_mtime)

    def iter_files(self) -> Iterator[StoredFile]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.IGNORE_DIRS)
            for fn in sorted(filenames):
                full = Path(dirpath) / fn
                rel = full.relative_to(self.root).as_posix()
                yield StoredFile(path=rel, mtime=full.stat().st_mtime)


__all__ = ["StoredFile", "StoredFolder", "StoredEntry", "BaseVault", "FileSystemVault"]
