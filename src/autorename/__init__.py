"""autorename: 按 <文档名>-<时间戳> 重命名 Markdown 文档引用的本地图片，并同步改写链接。

导出:
- ImageRenamer
- FileSystemVault
- find_all / find_at_cursor
- generate
"""

from autorename.core import FileSystemVault, ImageRenamer, find_all, find_at_cursor, generate

__version__ = "0.1.0"

__all__ = [
    "ImageRenamer",
    "FileSystemVault",
    "find_all",
    "find_at_cursor",
    "generate",
]
