import os
from datetime import datetime
from pathlib import Path

import pytest

from autorename.core.notify import Notifier
from autorename.core.renamer import ImageRenamer
from autorename.core.resolver import PathResolver
from autorename.core.vault import FileSystemVault

PHOTO_TIME = datetime(2024, 3, 5, 8, 7, 9)


def make_file(root: Path, rel: str, content: str | bytes = b"", mtime: datetime | None = None) -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        p.write_text(content, encoding="utf-8")
    else:
        p.write_bytes(content)
    if mtime is not None:
        ts = mtime.timestamp()
        os.utime(p, (ts, ts))
    return p


@pytest.fixture
def vault_root(tmp_path):
    """notes/diary.md + assets/photo.jpg (固定修改时间)"""
    make_file(tmp_path, "notes/diary.md", "# diary\n")
    make_file(tmp_path, "assets/photo.jpg", b"\xff\xd8jpeg", mtime=PHOTO_TIME)
    return tmp_path


@pytest.fixture
def vault(vault_root):
    return FileSystemVault(vault_root, case_insensitive=False)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def renamer(vault, notifier):
    return ImageRenamer(
        vault,
        resolver=PathResolver(vault),
        notifier=notifier,
        clock=lambda: datetime(2025, 1, 2, 3, 4, 5),
    )
