"""Typer CLI: 单链接重命名、整篇批量重命名、多文档批量与诊断。

命令示例:
  autorename scan notes/diary.md                 # 列出文档中的图片链接及解析结果
  autorename at notes/diary.md --line 3 --ch 5   # 重命名光标处的图片
  autorename all notes/diary.md --dry-run        # 预览整篇批量重命名
  autorename tree ./notes --recursive            # 目录下每篇文档执行批量重命名
  autorename name diary .png --at 2024-03-05T08:07:09
  autorename plugins
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .config import AutoRenameConfig, ConfigLoader
from .core import naming
from .core.base import ModuleContext
from .core.batch_module import BatchRenameModule
from .core.editor import DocumentEditor
from .core.errors import AutoRenameError
from .core.links import find_all
from .core.notify import ConsoleNotifier, Notifier
from .core.plugins import LinkOracle, PluginRegistry, create_registry
from .core.renamer import ImageRenamer
from .core.resolver import PathResolver
from .core.vault import FileSystemVault

app = typer.Typer(add_completion=False, no_args_is_help=True, help="autorename: 按文档名+时间戳重命名图片并同步改写链接")
console = Console()

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    config: AutoRenameConfig
    vault_override: Optional[Path] = None

    def vault(self) -> FileSystemVault:
        root = self.vault_override.resolve() if self.vault_override else self.config.vault_root()
        try:
            return FileSystemVault(root, case_insensitive=self.config.case_insensitive)
        except NotADirectoryError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1)

    def registry(self) -> PluginRegistry:
        return create_registry(self.config.plugins_enabled, self.config.plugins_disabled)

    def renamer(self, vault: FileSystemVault, notifier: Optional[Notifier] = None) -> ImageRenamer:
        resolver = PathResolver(vault, LinkOracle(self.registry(), vault))
        return ImageRenamer(
            vault,
            resolver=resolver,
            notifier=notifier if notifier is not None else ConsoleNotifier(console),
            cursor_strategy=self.config.cursor_strategy,
        )


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )


def _doc_path(vault: FileSystemVault, doc: Path) -> str:
    try:
        doc_path = vault.to_vault_path(doc)
    except ValueError:
        console.print(f"[red]文档不在 vault 内: {doc} (vault={vault.root})[/red]")
        raise typer.Exit(code=1)
    if vault.get_file(doc_path) is None:
        console.print(f"[red]文档不存在: {doc_path}[/red]")
        raise typer.Exit(code=1)
    return doc_path


@app.callback()
def _entry(
    ctx: typer.Context,
    config: Path = typer.Option(None, "-c", "--config", help="TOML 配置路径 (默认读取当前目录 autorename.toml)"),
    vault: Path = typer.Option(None, "--vault", help="vault 根目录 (覆盖配置)"),
    log_level: str = typer.Option("WARNING", "--log-level", help="日志级别"),
):
    _setup_logging(log_level)
    try:
        cfg = ConfigLoader.discover(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]配置加载失败: {e}[/red]")
        raise typer.Exit(code=1)
    logger.debug("配置来源: %s", cfg.source or "默认")
    ctx.obj = AppState(config=cfg, vault_override=vault)


@app.command()
def scan(ctx: typer.Context, doc: Path = typer.Argument(..., help="Markdown 文档")):
    """列出文档中的图片链接及解析结果。"""
    state: AppState = ctx.obj
    vault = state.vault()
    doc_path = _doc_path(vault, doc)
    renamer = state.renamer(vault)
    content = vault.read(doc_path)
    table = Table(title=f"Image Links - {doc_path}")
    table.add_column("Kind", style="cyan")
    table.add_column("Link")
    table.add_column("Alias/Alt", style="magenta")
    table.add_column("Span", justify="right")
    table.add_column("Resolved", overflow="fold")
    for occ in find_all(content):
        try:
            resolved = Text(renamer.resolver.resolve(occ.raw_link, doc_path).stored_path, style="green")
        except AutoRenameError as e:
            resolved = Text(e.kind, style="red")
        table.add_row(occ.kind.value, occ.raw_link, occ.alias or "-", f"{occ.start}-{occ.end}", resolved)
    console.print(table)


@app.command()
def at(
    ctx: typer.Context,
    doc: Path = typer.Argument(..., help="Markdown 文档"),
    line: int = typer.Option(..., "--line", "-l", help="行号 (从 1 开始)"),
    ch: int = typer.Option(0, "--ch", help="行内字符偏移 (从 0 开始)"),
):
    """重命名光标处的图片并改写该链接。"""
    state: AppState = ctx.obj
    vault = state.vault()
    doc_path = _doc_path(vault, doc)
    editor = DocumentEditor(vault, doc_path, cursor=(line - 1, ch))
    result = state.renamer(vault).rename_at_cursor(editor)
    if not result.ok:
        raise typer.Exit(code=1)
    console.print(f"{result.old_path} -> [green]{result.new_path}[/green]")


def _print_diff(label: str, original: str, new_text: str) -> None:
    d = BatchRenameModule._diff(label, original, new_text)
    console.rule(f"diff: {d['file']}")
    for ln in d["diff"][:80]:
        style = None
        if ln.startswith("+") and not ln.startswith("+++"):
            style = "green"
        elif ln.startswith("-") and not ln.startswith("---"):
            style = "red"
        console.print(Text(ln.rstrip("\n"), style=style))
    if len(d["diff"]) > 80:
        console.print("... (截断)")


@app.command("all")
def rename_all(
    ctx: typer.Context,
    doc: Path = typer.Argument(..., help="Markdown 文档"),
    dry_run: bool = typer.Option(False, help="干运行: 不重命名不写文件, 输出 diff"),
):
    """重命名文档中的全部本地图片 (文档名 + 图片修改时间)。"""
    state: AppState = ctx.obj
    vault = state.vault()
    doc_path = _doc_path(vault, doc)
    result = state.renamer(vault).rename_all(doc_path, dry_run=dry_run)
    if not result.ok:
        raise typer.Exit(code=1)
    table = Table(title="Rename Result")
    table.add_column("Old", overflow="fold")
    table.add_column("New", style="green", overflow="fold")
    table.add_column("Status", justify="center")
    for it in result.items:
        status = "✅" if it.ok else f"❌ {it.error_kind}"
        table.add_row(it.task.target.stored_path, it.task.new_path, status)
    console.print(table)
    if dry_run and result.changed:
        _print_diff(doc_path, result.original, result.content)


@app.command()
def tree(
    ctx: typer.Context,
    path: Path = typer.Argument(Path("."), help="文件或目录 (默认为当前目录)"),
    include: List[str] = typer.Option([], help="包含模式, 可多次使用"),
    exclude: List[str] = typer.Option([], help="排除模式, 可多次使用"),
    recursive: Optional[bool] = typer.Option(None, help="递归查找 *.md"),
    dry_run: bool = typer.Option(False, help="干运行: 不写文件, 收集 diff"),
):
    """对目录下每篇文档执行批量重命名。"""
    state: AppState = ctx.obj
    cfg = state.config
    vault = state.vault()
    mctx = ModuleContext(root=vault.root)
    if dry_run:
        mctx.shared["__dry_run"] = True
    mod = BatchRenameModule(state.renamer(vault, notifier=Notifier()))
    mod.run(mctx, {
        "input": str(path.resolve()),
        "include": include or cfg.include or None,
        "exclude": exclude or cfg.exclude or None,
        "recursive": cfg.recursive if recursive is None else recursive,
        "verbose": cfg.verbose,
    })
    data = mctx.shared.get(mod.name, {})
    if dry_run:
        for d in data.get("diffs", [])[:3]:
            console.rule(f"diff: {d['file']}")
            for ln in d["diff"][:40]:
                console.print(ln.rstrip("\n"))


@app.command()
def name(
    doc_base: str = typer.Argument(..., help="文档名 (不含扩展名)"),
    ext: str = typer.Argument(..., help="扩展名, 如 .png"),
    at_: Optional[str] = typer.Option(None, "--at", help="ISO 时间, 默认当前时间"),
):
    """打印生成的新文件名。"""
    try:
        ts = datetime.fromisoformat(at_) if at_ else datetime.now()
    except ValueError:
        raise typer.BadParameter(f"无效的时间: {at_}")
    if ext and not ext.startswith("."):
        ext = "." + ext
    typer.echo(naming.generate(doc_base, ts, ext))


@app.command()
def plugins(ctx: typer.Context):
    """列出链接解析插件及其状态。"""
    state: AppState = ctx.obj
    pm = state.registry()
    table = Table(title="Link Resolver Plugins")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled", justify="center")
    table.add_column("Source")
    for item in pm.list_plugins_status():
        table.add_row(item["name"], "✅" if item["enabled"] else "❌", item["origin"])
    console.print(table)


if __name__ == "__main__":  # pragma: no cover
    app()
