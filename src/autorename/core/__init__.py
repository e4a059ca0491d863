"""autorename 核心: 链接识别 / 路径解析 / 命名 / 重命名编排 / 内容改写"""
from .errors import (
    AutoRenameError,
    ExternalLinkError,
    ImageNotFoundError,
    NoActiveDocumentError,
    NoImagesFoundError,
    NoLinkAtCursorError,
    RenameConflictError,
    RenameFailureError,
    UnresolvableLinkError,
)
from .links import LinkKind, LinkOccurrence, find_all, find_at_cursor
from .naming import generate
from .resolver import PathResolver, ResolvedTarget
from .rewriter import RewriteMapping, rewrite_document, rewrite_span
from .renamer import BatchRenameResult, ImageRenamer, RenameTask, SingleRenameResult
from .vault import BaseVault, FileSystemVault, StoredFile, StoredFolder

__all__ = [
    "AutoRenameError",
    "ExternalLinkError",
    "ImageNotFoundError",
    "NoActiveDocumentError",
    "NoImagesFoundError",
    "NoLinkAtCursorError",
    "RenameConflictError",
    "RenameFailureError",
    "UnresolvableLinkError",
    "LinkKind",
    "LinkOccurrence",
    "find_all",
    "find_at_cursor",
    "generate",
    "PathResolver",
    "ResolvedTarget",
    "RewriteMapping",
    "rewrite_document",
    "rewrite_span",
    "BatchRenameResult",
    "ImageRenamer",
    "RenameTask",
    "SingleRenameResult",
    "BaseVault",
    "FileSystemVault",
    "StoredFile",
    "StoredFolder",
]
