"""错误类型

每个异常带有 kind 字段，用于通知/报告中区分失败类别。
"""
from __future__ import annotations


class AutoRenameError(Exception):
    """所有重命名相关错误的基类"""

    kind: str = "AutoRenameError"

    def __init__(self, message: str = "", *, link: str | None = None):
        super().__init__(message or self.kind)
        self.link = link


class UnresolvableLinkError(AutoRenameError):
    """去除别名后链接为空"""
    kind = "UnresolvableLink"


class ExternalLinkError(AutoRenameError):
    """带 scheme:// 前缀的外部链接，不做处理"""
    kind = "ExternalLink"


class ImageNotFoundError(AutoRenameError):
    """所有候选路径都未找到文件"""
    kind = "FileNotFound"


class RenameConflictError(AutoRenameError):
    """目标路径已存在"""
    kind = "RenameConflict"


class RenameFailureError(AutoRenameError):
    """存储层重命名失败 (源文件消失 / OS 错误)"""
    kind = "RenameFailure"


class NoActiveDocumentError(AutoRenameError):
    kind = "NoActiveDocument"


class NoImagesFoundError(AutoRenameError):
    kind = "NoImagesFound"


class NoLinkAtCursorError(AutoRenameError):
    kind = "NoLinkAtCursor"


# 解析阶段的错误：批量模式下静默跳过
RESOLUTION_ERRORS = (UnresolvableLinkError, ExternalLinkError, ImageNotFoundError)

__all__ = [
    "AutoRenameError",
    "UnresolvableLinkError",
    "ExternalLinkError",
    "ImageNotFoundError",
    "RenameConflictError",
    "RenameFailureError",
    "NoActiveDocumentError",
    "NoImagesFoundError",
    "NoLinkAtCursorError",
    "RESOLUTION_ERRORS",
]
