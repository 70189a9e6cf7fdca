"""i18n-janitor CLI - translation key navigation and unused-key detection."""
import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import click
import typer
from rich.markup import escape
from rich.table import Table

from .analyzer.cache import ScanCache
from .analyzer.completion import completion_context, suggest_keys
from .analyzer.corpus import discover_source_files
from .analyzer.jsonc_parser import offset_to_line_character
from .analyzer.locale_index import IndexedNode, index_document
from .analyzer.locator import locate_by_offset
from .analyzer.navigation import find_definition, find_definitions, resolve_key_at
from .analyzer.reconciler import INITIAL_DEBOUNCE_DELAY, UsageReconciler
from .analyzer.scope import resolve_scope_prefix
from .analyzer.usage import recompute_used_keys, unused_leaf_nodes
from .config import ENV_FILE_NAME, NAMING_PATTERNS, Config, get_config, render_env_template
from .utils.logger import SafeConsole
from .watcher import SourceChangeHandler, start_observer

app = typer.Typer(
    name="i18n-janitor",
    help="Translation key navigation and unused-key detection",
    add_completion=False
)
# Use SafeConsole for Windows Unicode compatibility
console = SafeConsole()

# Cache management sub-command
cache_app = typer.Typer(name="cache", help="Manage the i18n-janitor scan cache")


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _load_project(project_path: str) -> Tuple[Path, Config]:
    """Resolve the project root and load its enabled configuration."""
    root = Path(project_path).resolve()
    if not root.exists():
        _fail(f"Project path does not exist: {escape(str(root))}")

    config = get_config(root)
    try:
        enabled = config.enabled
    except ValueError as e:
        _fail(escape(str(e)))
    if not enabled:
        _fail("i18n-janitor is disabled for this project (I18N_ENABLED=false)")
    return root, config


def _read_text(file_path: Path) -> str:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {escape(str(file_path))}: {escape(str(e))}")


def _display_path(path: Path, root: Path) -> str:
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)


def _target_locales(config: Config, locale: Optional[str], all_locales: bool) -> List[str]:
    if all_locales:
        return [entry.locale for entry in config.available_locales() if entry.exists]
    return [locale or config.default_locale]


def _unused_table(title: str, text: str, nodes: List[IndexedNode]) -> Table:
    table = Table(title=title)
    table.add_column("Key", style="cyan", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    for node in nodes:
        line, _ = offset_to_line_character(text, node.key_range[0])
        table.add_row(escape(node.key_path), str(line + 1))
    return table


@app.command()
def unused(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale to check (default: configured default locale)"),
    all_locales: bool = typer.Option(False, "--all", help="Check every existing supported locale"),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 1 when unused keys are found"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Re-scan every source file"),
):
    """Scan the project and list locale keys no call site uses."""
    root, config = _load_project(project_path)

    with console.status("[bold blue]Scanning source files...") as status:
        files = discover_source_files(root, config.source_extensions)
        status.update(f"[bold blue]Reconciling {len(files)} source files...")
        cache = None if no_cache else ScanCache(root)
        try:
            used = asyncio.run(recompute_used_keys(
                files, config.function_names,
                scope_names=config.scope_function_names, cache=cache,
            ))
        finally:
            if cache is not None:
                cache.close()

    console.print(f"[bold blue]Scanned:[/bold blue] {len(files)} files, {len(used)} used keys\n")

    total_unused = 0
    for target in _target_locales(config, locale, all_locales):
        locale_path = config.locale_file_path(target)
        if not locale_path.is_file():
            console.print(f"[bold yellow]Locale file not found:[/bold yellow] {escape(str(locale_path))}")
            continue

        text = _read_text(locale_path)
        nodes = index_document(text)
        if not nodes and text.strip():
            console.print(f"[bold yellow]⚠ Could not parse[/bold yellow] {escape(_display_path(locale_path, root))}")
            continue

        unused_nodes = unused_leaf_nodes(nodes, used)
        total_unused += len(unused_nodes)
        if unused_nodes:
            console.print(_unused_table(f"Unused Keys ({target})", text, unused_nodes))
        else:
            console.print(f"[bold green]✓ No unused keys in {escape(_display_path(locale_path, root))}[/bold green]")

    if total_unused:
        console.print(f"\n[bold yellow]Summary:[/bold yellow] {total_unused} unused key(s)")
        if strict:
            raise typer.Exit(1)


@app.command()
def locate(
    key: str = typer.Argument(..., help="Dotted translation key, e.g. dashboard.title"),
    project_path: str = typer.Argument(".", help="Project root path"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale to search"),
    all_locales: bool = typer.Option(False, "--all", help="Search every existing supported locale"),
):
    """Show where a key is defined."""
    root, config = _load_project(project_path)

    if all_locales:
        definitions = find_definitions(config, key)
    else:
        definition = find_definition(config, key, locale)
        definitions = [definition] if definition else []

    if not definitions:
        target = "any locale" if all_locales else f"locale '{locale or config.default_locale}'"
        _fail(f'Key "{escape(key)}" not found in {escape(target)}')

    table = Table(title=f"Definitions of {escape(key)}")
    table.add_column("Locale", style="cyan")
    table.add_column("File", style="magenta", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    table.add_column("Column", style="green", justify="right")
    for definition in definitions:
        table.add_row(
            definition.locale,
            escape(_display_path(definition.path, root)),
            str(definition.position.line + 1),
            str(definition.position.character + 1),
        )
    console.print(table)


@app.command("key-at")
def key_at(
    file: Path = typer.Argument(..., help="Source file"),
    line: int = typer.Argument(..., min=1, help="Cursor line (1-based)"),
    column: int = typer.Argument(..., min=1, help="Cursor column (1-based)"),
    project_path: str = typer.Option(".", "--project", "-p", help="Project root path"),
    segment: bool = typer.Option(False, "--segment", help="Only up to the dot segment under the cursor"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale to jump to"),
):
    """Resolve the translation key under a cursor and find its definition."""
    root, config = _load_project(project_path)
    text = _read_text(file)

    key = resolve_key_at(
        text, line - 1, column - 1, config.function_names,
        config.scope_function_names, segment_only=segment,
    )
    if key is None:
        _fail("No translation key found at cursor position")

    console.print(f"[bold blue]Key:[/bold blue] {escape(key)}")

    locale_path = config.locale_file_path(locale or config.default_locale)
    if not locale_path.is_file():
        _fail(f"Locale file not found: {escape(str(locale_path))}")

    definition = find_definition(config, key, locale)
    if definition is None:
        _fail(f'Key "{escape(key)}" not found in {escape(_display_path(locale_path, root))}')

    console.print(
        f"[green]→ {escape(_display_path(definition.path, root))}"
        f":{definition.position.line + 1}:{definition.position.character + 1}[/green]"
    )


@app.command("key-path")
def key_path(
    file: Path = typer.Argument(..., help="Locale JSON file"),
    offset: int = typer.Argument(..., min=0, help="Character offset in the file"),
):
    """Print the full dotted key of the key name at an offset."""
    text = _read_text(file)
    path = locate_by_offset(text, offset)
    if path is None:
        _fail("Could not determine translation key at offset")
    console.print(escape(path), highlight=False)


@app.command()
def complete(
    file: Path = typer.Argument(..., help="Source file"),
    line: int = typer.Argument(..., min=1, help="Cursor line (1-based)"),
    column: int = typer.Argument(..., min=1, help="Cursor column (1-based)"),
    project_path: str = typer.Option(".", "--project", "-p", help="Project root path"),
):
    """Suggest key segments for a partially typed translation call."""
    _, config = _load_project(project_path)
    lines = _read_text(file).split("\n")
    if line > len(lines):
        _fail(f"Line {line} is past the end of the file")

    typed = completion_context(lines[line - 1][:column - 1], config.function_names)
    if typed is None:
        _fail("Cursor is not inside a translation call")

    locale_path = config.locale_file_path(config.default_locale)
    if not locale_path.is_file():
        _fail(f"Default locale file not found: {escape(str(locale_path))}")

    prefix = resolve_scope_prefix(lines, line - 1, config.scope_function_names)
    suggestions = suggest_keys(_read_text(locale_path), typed, prefix)
    if not suggestions:
        console.print("[dim]No suggestions[/dim]")
        return

    table = Table(title="Suggestions")
    table.add_column("Insert", style="cyan")
    table.add_column("Translation", style="magenta", no_wrap=False)
    for suggestion in suggestions:
        detail = "[dim]nested keys[/dim]" if suggestion.is_container else escape(str(suggestion.value))
        table.add_row(escape(suggestion.insert_text), detail)
    console.print(table)


@app.command()
def locales(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """List configured locales and whether their files exist."""
    root, config = _load_project(project_path)
    entries = config.available_locales()

    table = Table(title="Locales")
    table.add_column("Locale", style="cyan")
    table.add_column("File", style="magenta", no_wrap=False)
    table.add_column("Status")
    for entry in entries:
        status = "[green]✅ found[/green]" if entry.exists else "[red]❌ missing[/red]"
        table.add_row(entry.locale.upper(), escape(_display_path(entry.path, root)), status)

    console.print(table)
    console.print(f"[dim]Locales path: {escape(str(config.locales_path))}[/dim]")


@app.command()
def init(
    project_path: str = typer.Argument(".", help="Project root path"),
    naming: Optional[str] = typer.Option(None, "--naming", "-n", help="Locale file layout: locale.json, locale/common.json or locale/index.json"),
):
    """Write a .env file with the i18n-janitor settings."""
    root = Path(project_path).resolve()
    if not root.is_dir():
        _fail(f"Project path does not exist: {escape(str(root))}")

    env_path = root / ENV_FILE_NAME
    if env_path.exists():
        _fail(f"{escape(str(env_path))} already exists; add the I18N_* variables by hand")

    # Prompt for the layout if not provided
    if naming is None:
        naming = typer.prompt(
            "How are locale files laid out?",
            type=click.Choice(list(NAMING_PATTERNS)),
            default="locale.json"
        )

    if naming not in NAMING_PATTERNS:
        _fail(f"Invalid layout '{escape(naming)}'. Use one of: {', '.join(NAMING_PATTERNS)}")

    env_path.write_text(render_env_template(naming), encoding="utf-8")
    console.print(f"[green]✓ Created {escape(str(env_path))}[/green]")


@app.command()
def watch(
    project_path: str = typer.Argument(".", help="Project root path to watch"),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Locale to report on"),
    delay: float = typer.Option(0.8, "--delay", help="Debounce delay in seconds"),
):
    """Keep the unused-key report current while files change."""
    root, config = _load_project(project_path)
    locale_path = config.locale_file_path(locale or config.default_locale)
    if not locale_path.is_file():
        _fail(f"Locale file not found: {escape(str(locale_path))}")

    console.print(f"[bold blue]👀 Watching[/bold blue] {escape(str(root))} [dim](Ctrl+C to stop)[/dim]\n")
    try:
        asyncio.run(_watch(root, config, locale_path, delay))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")


def _report_unused(reconciler: UsageReconciler, locale_path: Path, root: Path) -> None:
    """Re-index the watched locale file and print its unused keys."""
    try:
        text = locale_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        reconciler.forget_document(locale_path)
        console.print(f"[bold yellow]Locale file unavailable:[/bold yellow] {escape(str(locale_path))}")
        return
    unused_nodes = reconciler.refresh_document(locale_path, text)
    if unused_nodes:
        console.print(_unused_table(f"Unused Keys ({_display_path(locale_path, root)})", text, unused_nodes))
    else:
        console.print("[bold green]✓ No unused keys[/bold green]")


def _report_locale_change(reconciler: UsageReconciler, locale_path: Path, root: Path) -> None:
    # Before the first pass the used set is empty and every key would look unused
    if reconciler.completed_passes == 0:
        return
    _report_unused(reconciler, locale_path, root)


async def _watch(root: Path, config: Config, locale_path: Path, delay: float) -> None:
    loop = asyncio.get_running_loop()
    cache = ScanCache(root)

    reconciler = UsageReconciler(
        lambda: discover_source_files(root, config.source_extensions),
        config.function_names,
        scope_names=config.scope_function_names,
        cache=cache,
        delay=delay,
        on_updated=lambda _used: _report_unused(reconciler, locale_path, root),
    )
    handler = SourceChangeHandler(
        loop, reconciler, root,
        locale_files=[locale_path],
        on_locale_changed=lambda _path: _report_locale_change(reconciler, locale_path, root),
        extensions=config.source_extensions,
    )
    observer = start_observer(handler)
    reconciler.trigger_recompute(INITIAL_DEBOUNCE_DELAY)

    try:
        while True:
            await asyncio.sleep(1)
    finally:
        reconciler.cancel()
        observer.stop()
        observer.join()
        cache.close()


# =========================================================================
# CACHE MANAGEMENT COMMANDS
# =========================================================================

@cache_app.command("clear")
def cache_clear(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Clear the scan cache for a project."""
    project_path = Path(project_path).resolve()

    if not project_path.exists():
        _fail(f"Project path does not exist: {escape(str(project_path))}")

    with ScanCache(project_path) as cache:
        cache.clear_cache()

    console.print(f"[green]✓ Cache cleared for {escape(str(project_path))}[/green]")


@cache_app.command("stats")
def cache_stats(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Display scan cache statistics for a project."""
    project_path = Path(project_path).resolve()

    if not project_path.exists():
        _fail(f"Project path does not exist: {escape(str(project_path))}")

    with ScanCache(project_path) as cache:
        stats = cache.get_cache_stats()

    table = Table(title=f"Cache Statistics: {escape(str(project_path))}", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Files Cached", str(stats['total_files']))
    table.add_row("Call Sites Cached", str(stats['cached_call_sites']))

    console.print(table)


# Register cache sub-command
app.add_typer(cache_app)


@app.callback()
def main():
    """i18n-janitor - translation key navigation and unused-key detection."""
    pass


if __name__ == "__main__":
    app()
