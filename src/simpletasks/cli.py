"""CLI entry point: query and edit vault tasks from the terminal."""

import argparse
import logging
import sys
from pathlib import Path

from simpletasks.config import get_settings
from simpletasks.settings import exclusions_from_settings, load_settings
from simpletasks.tasks.extractor import Task, render_segments
from simpletasks.tasks.suggest import suggest_categories
from simpletasks.tasks.view import TaskView
from simpletasks.tasks.view_config import ViewConfig, parse_view_config
from simpletasks.vault.connector import VaultConnector

logger = logging.getLogger("simpletasks.cli")


def format_task(task: Task) -> str:
    """One line per task: checkbox, text with the date bracketed, file hint."""
    box = "[x]" if task.done else "[ ]"
    parts = []
    for segment in render_segments(task.raw_text):
        if segment.kind == "date":
            parts.append(f"<{segment.text}>")
        elif segment.kind == "category":
            parts.append(f"=={segment.text}==")
        else:
            parts.append(segment.text)
    return f"{box} {''.join(parts)}  ({task.document.basename}:{task.line_index + 1})"


def _block_from_args(args: argparse.Namespace) -> str:
    """Turn `list` options into a view block, so both paths share one parser."""
    if args.block:
        return Path(args.block).read_text(encoding="utf-8")
    lines = [f"status: {args.status}", f"sort: {args.sort}"]
    if args.search:
        lines.append(f"search: {args.search}")
    if args.date:
        lines.append(f"date: {args.date}")
    if args.date_from:
        lines.append(f"from: {args.date_from}")
    if args.date_to:
        lines.append(f"to: {args.date_to}")
    if args.exclude_tags:
        lines.append(f"exclude-tags: {args.exclude_tags}")
    if args.exclude_folders:
        lines.append(f"exclude-folders: {args.exclude_folders}")
    lines.extend(f"=={c}==" for c in args.category or [])
    return "\n".join(lines)


def _build_view(vault_path: Path, view_config: ViewConfig | None = None) -> TaskView:
    settings = get_settings()
    connector = VaultConnector(
        vault_path,
        include_patterns=settings.include_patterns,
        exclude_patterns=settings.exclude_patterns,
    )
    exclusions = exclusions_from_settings(load_settings(Path(settings.data_path)))
    return TaskView(
        connector,
        exclusions=exclusions,
        view_config=view_config,
        max_workers=settings.scan_workers,
        rescan_after_edit=False,
    )


def _cmd_list(view: TaskView, view_config: ViewConfig) -> int:
    if view_config.title:
        print(f"# {view_config.title}")
    if "list" in view_config.views:
        tasks = view.tasks()
        if not tasks:
            print("No tasks found.")
        for task in tasks:
            print(format_task(task))
    if "stats" in view_config.views:
        stats = view.stats()
        print(
            f"{stats.total} tasks: {stats.done} done, {stats.undone} open, "
            f"{stats.overdue} overdue, {stats.undated} undated"
        )
        for category, count in sorted(stats.by_category.items()):
            print(f"  {category or '(none)'}: {count}")
    return 0


def _find_or_fail(view: TaskView, path: str, line: int) -> Task | None:
    task = view.find(path, line - 1)
    if task is None:
        logger.error("No task at %s:%d", path, line)
    return task


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Checkbox tasks in an Obsidian vault")
    parser.add_argument(
        "--vault-path",
        type=Path,
        default=None,
        help="Override vault path (default: from config/env)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_p = sub.add_parser("list", help="List tasks")
    list_p.add_argument("--block", help="Read view directives from this file")
    list_p.add_argument("--status", choices=["all", "done", "undone"], default="all")
    list_p.add_argument("--sort", choices=["date", "file"], default="date")
    list_p.add_argument("--search", default="")
    list_p.add_argument("--date", help='Relative range, e.g. "next 1 weeks"')
    list_p.add_argument("--from", dest="date_from")
    list_p.add_argument("--to", dest="date_to")
    list_p.add_argument("--category", action="append")
    list_p.add_argument("--exclude-tags", help="Comma-separated")
    list_p.add_argument("--exclude-folders", help="Comma-separated")

    sub.add_parser("stats", help="Task counts")

    toggle_p = sub.add_parser("toggle", help="Check/uncheck the task at PATH:LINE")
    toggle_p.add_argument("path")
    toggle_p.add_argument("line", type=int, help="1-based line number")

    date_p = sub.add_parser("date", help="Change the date of the task at PATH:LINE")
    date_p.add_argument("path")
    date_p.add_argument("line", type=int, help="1-based line number")
    date_p.add_argument("new_date", help="YYYY-MM-DD")

    cat_p = sub.add_parser("categories", help="List categories")
    cat_p.add_argument("query", nargs="?", default="")

    sub.add_parser("serve", help="Run the HTTP API")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "serve":
        import uvicorn

        settings = get_settings()
        uvicorn.run("simpletasks.main:app", host=settings.host, port=settings.port)
        return 0

    vault_path = args.vault_path or get_settings().vault_path
    if vault_path is None:
        logger.error("No vault path configured. Set SIMPLETASKS_VAULT_PATH or use --vault-path")
        return 1
    vault_path = Path(vault_path)
    if not vault_path.exists():
        logger.error("Vault path does not exist: %s", vault_path)
        return 1

    if args.command == "list":
        view_config = parse_view_config(_block_from_args(args))
    elif args.command == "stats":
        view_config = ViewConfig(views=("stats",))
    else:
        view_config = ViewConfig()

    view = _build_view(vault_path, view_config)
    result = view.refresh()
    if result.partial:
        logger.warning("Could not read: %s", ", ".join(result.failed))

    if args.command in ("list", "stats"):
        return _cmd_list(view, view_config)

    if args.command == "categories":
        for name in suggest_categories(view.category_cache.snapshot(), args.query):
            print(name)
        return 0

    task = _find_or_fail(view, args.path, args.line)
    if task is None:
        return 1
    try:
        if args.command == "toggle":
            written = view.toggle_status(task)
        else:
            written = view.change_date(task, args.new_date)
    except ValueError as e:
        logger.error("%s", e)
        return 2
    if not written:
        logger.error("Line %d of %s changed since the scan; nothing written", args.line, args.path)
        return 1
    print(format_task(task))
    return 0


if __name__ == "__main__":
    sys.exit(main())
