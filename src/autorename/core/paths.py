"""vault 内路径工具 (解析器与编排器共用)

vault 路径统一为相对 vault 根目录的 POSIX 字符串，例如 ``assets/a.png``。
"""
from __future__ import annotations

import platform
import posixpath
import re

_SCHEME_RE = re.compile(r'^[a-zA-Z]+://')


def is_case_insensitive_fs() -> bool:
    """Windows / macOS 默认大小写不敏感"""
    return platform.system() in ("Windows", "Darwin")


def is_external(link: str) -> bool:
    return bool(_SCHEME_RE.match(link))


def normalize_path(path: str) -> str:
    """规范化 vault 路径: 统一分隔符、折叠 ./ 与 //、解析 ..、去掉首尾 /

    越过 vault 根目录的路径会保留 .. 前缀，由调用方判定。
    """
    p = path.strip().replace("\\", "/").lstrip("/")
    if not p:
        return ""
    p = posixpath.normpath(p).rstrip("/")
    return "" if p == "." else p


def escapes_root(path: str) -> bool:
    return path == ".." or path.startswith("../")


def canonical_key(path: str, case_insensitive: bool = False) -> str:
    """去重/比较用的键"""
    p = normalize_path(path)
    return p.casefold() if case_insensitive else p


def parent_folder(path: str) -> str:
    """所在文件夹 (无尾部 /)，根目录返回空串"""
    return path.rsplit("/", 1)[0] if "/" in path else ""


def join_path(folder: str, name: str) -> str:
    return f"{folder}/{name}" if folder else name


def split_ext(name: str) -> tuple[str, str]:
    """按最后一个 . 拆分文件名；无 . 时扩展名为空串"""
    if "." in name:
        idx = name.rfind(".")
        return name[:idx], name[idx:]
    return name, ""
