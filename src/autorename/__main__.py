"""autorename 包入口：委托到 Typer CLI。

示例：
    python -m autorename scan notes/diary.md
    python -m autorename all notes/diary.md --dry-run
"""
from __future__ import annotations

from .cli import app


def main():
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
