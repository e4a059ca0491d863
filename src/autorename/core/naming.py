"""新文件名生成: <文档名>-<YYYYMMDD>-<HHMMSS><扩展名>"""
from __future__ import annotations

from datetime import datetime

from .paths import join_path, parent_folder, split_ext


def format_timestamp(ts: datetime) -> str:
    return f"{ts.year:04d}{ts.month:02d}{ts.day:02d}-{ts.hour:02d}{ts.minute:02d}{ts.second:02d}"


def generate(doc_base: str, timestamp: datetime, extension: str) -> str:
    """同一文档名 + 同一秒会得到相同结果，调用方自行处理冲突"""
    return f"{doc_base}-{format_timestamp(timestamp)}{extension}"


def doc_base(doc_path: str) -> str:
    """文档文件名去掉扩展名"""
    return split_ext(doc_path.rsplit("/", 1)[-1])[0]


def sibling_path(stored_path: str, new_name: str) -> str:
    """保留原文件夹，只换文件名"""
    return join_path(parent_folder(stored_path), new_name)


__all__ = ["format_timestamp", "generate", "doc_base", "sibling_path"]
