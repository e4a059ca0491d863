"""通知: 短暂的成功/失败提示"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class Notifier:
    """记录所有通知，便于调用方/测试查看"""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []   # (level, message)

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((level, message))
        logger.debug("[%s] %s", level, message)

    def info(self, message: str) -> None:
        self.notify(message, "info")

    def success(self, message: str) -> None:
        self.notify(message, "success")

    def error(self, message: str) -> None:
        self.notify(message, "error")

    def of_level(self, level: str) -> List[str]:
        return [m for lv, m in self.messages if lv == level]


class ConsoleNotifier(Notifier):
    STYLES = {"info": "cyan", "success": "bold green", "error": "bold red"}

    def __init__(self, console: Optional[Console] = None):
        super().__init__()
        self.console = console or Console()

    def notify(self, message: str, level: str = "info") -> None:
        super().notify(message, level)
        style = self.STYLES.get(level, "white")
        self.console.print(f"[{style}]{escape(message)}[/{style}]")
