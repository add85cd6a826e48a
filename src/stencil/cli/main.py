#!/usr/bin/env python3
"""Entry point for the stencil CLI."""

from __future__ import annotations

import argparse
import json
import sys
from textwrap import dedent

from stencil import __version__
from stencil import settings as settings_module
from stencil.adapters.copy_executors import select_executor
from stencil.adapters.fs_template_repo import FSTemplateRepository, SkippedTemplate
from stencil.app.sync_service import SyncPlanner
from stencil.app.template_service import MaterializeResult, TemplateService
from stencil.domain import languages
from stencil.domain.errors import StencilError
from stencil.domain.sync import SyncMode
from stencil.domain.template import TEMPLATE_CONFIG_FILE, Template
from stencil.settings import SETTINGS

HELP_OVERVIEW = dedent(
    """
    Manage reusable project templates stored under ~/.stencil/templates.

    A template is any directory holding a .template.toml descriptor:
      - stencil author PATH        - turn PATH into a template
      - stencil list               - show available templates
      - stencil init TEMPLATE      - copy a template into an existing directory
      - stencil new TEMPLATE PATH  - create PATH from a template
    """
)


def _build_service() -> TemplateService:
    repository = FSTemplateRepository(SETTINGS.template_dir)
    planner = SyncPlanner(select_executor(SETTINGS))
    return TemplateService(repository, planner, SETTINGS)


def _error(exc: Exception) -> int:
    message = " ".join(str(exc).split())
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def _report_skipped(skipped: list[SkippedTemplate]) -> None:
    for entry in skipped:
        _warn(f"Failed to parse {entry.config_path}: {entry.reason}")


def _author_cmd(args: argparse.Namespace) -> int:
    service = _build_service()
    try:
        result = service.author(
            args.path,
            args.name,
            language=args.language,
            description=args.description,
        )
    except StencilError as exc:
        return _error(exc)
    if result.created_dir:
        print(f"Created directory: {result.path}")
    print(f"Template '{result.name}' created at {result.path}")
    print(f"Edit {TEMPLATE_CONFIG_FILE} to customize the template metadata")
    return 0


def _print_verbose(template: Template) -> None:
    descriptor = template.descriptor
    print(template.display_name)
    print(f"   Identity: {template.identity}")
    print(f"   Path: {template.path}")
    if template.language_display:
        print(f"   Language: {template.language_display}")
    if descriptor.description:
        print(f"   Description: {descriptor.description}")
    if descriptor.author:
        print(f"   Author: {descriptor.author}")
    if descriptor.version:
        print(f"   Version: {descriptor.version}")
    if descriptor.tags:
        print(f"   Tags: {', '.join(descriptor.tags)}")
    if descriptor.min_tool_version:
        print(f"   Requires: stencil >= {descriptor.min_tool_version}")
    print()


def _print_brief(template: Template) -> None:
    line = f"  {template.display_name}"
    if template.identity != template.display_name:
        line += f" ({template.identity})"
    if template.language_display:
        line += f" [{template.language_display}]"
    if template.descriptor.description:
        line += f" - {template.descriptor.description}"
    print(line)


def _list_cmd(args: argparse.Namespace) -> int:
    service = _build_service()
    try:
        result = service.list_templates(args.language)
    except StencilError as exc:
        return _error(exc)
    _report_skipped(result.skipped)

    if args.json:
        print(json.dumps([t.to_dict() for t in result.templates], ensure_ascii=False, indent=2, default=str))
        return 0
    if not result.templates:
        if args.language:
            print(f"No templates found for language '{args.language}'.")
        else:
            print("No templates found.")
            print(
                f"Templates are directories under {service.repository.base_dir} containing a {TEMPLATE_CONFIG_FILE} file."
            )
        return 0

    print("Available templates:" + ("\n" if args.verbose else ""))
    for template in result.templates:
        if args.verbose:
            _print_verbose(template)
        else:
            _print_brief(template)
    print("Use 'stencil init <template>' or 'stencil new <template> <path>' to use a template.")
    return 0


def _print_sync(command: str, result: MaterializeResult, *, as_json: bool) -> None:
    sync = result.sync
    if as_json:
        payload = {
            "command": command,
            "template": result.template.identity,
            "target": str(result.target),
            **sync.to_dict(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return
    prefix = "[dry-run] " if sync.dry_run else ""
    if sync.created_target:
        verb = "Would create" if sync.dry_run else "Created"
        print(f"{prefix}{verb} directory: {result.target}")
    if sync.summary:
        print(sync.summary)
    if not sync.changed:
        print(f"{prefix}Nothing to do: {result.target} is up to date")
    elif sync.dry_run:
        print(f"{prefix}{len(sync.changes)} change(s) planned from '{result.template.display_name}'")
    else:
        print(f"Applied '{result.template.display_name}' to {result.target} ({len(sync.changes)} change(s))")


def _sync_mode(args: argparse.Namespace) -> SyncMode:
    return SyncMode(dry_run=args.dry_run, force=args.force, delete=args.delete)


def _init_cmd(args: argparse.Namespace) -> int:
    service = _build_service()
    try:
        result = service.init(args.template, args.path, _sync_mode(args))
    except StencilError as exc:
        return _error(exc)
    finally:
        _report_skipped(service.repository.skipped)
    for warning in result.warnings:
        _warn(warning)
    _print_sync("init", result, as_json=args.json)
    return 0


def _new_cmd(args: argparse.Namespace) -> int:
    service = _build_service()
    try:
        result = service.new(args.template, args.path, _sync_mode(args))
    except StencilError as exc:
        return _error(exc)
    finally:
        _report_skipped(service.repository.skipped)
    for warning in result.warnings:
        _warn(warning)
    _print_sync("new", result, as_json=args.json)
    return 0


def _languages_cmd(args: argparse.Namespace) -> int:
    entries = languages.languages()
    if args.json:
        payload = [{"name": entry.display_name, "aliases": list(entry.aliases)} for entry in entries]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    width = max(len(entry.display_name) for entry in entries)
    for entry in entries:
        print(f"{entry.display_name.ljust(width)}  {', '.join(entry.aliases)}")
    return 0


def _add_sync_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-n", "--dry-run", action="store_true", help="Preview changes without copying files")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing files")
    parser.add_argument(
        "--delete",
        action="store_true",
        help="Remove destination files not present in the template (dangerous!)",
    )
    parser.add_argument("--json", action="store_true", help="Emit machine-readable output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stencil",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"stencil {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    author_cmd = sub.add_parser("author", help="Author a new template")
    author_cmd.add_argument("path", help="Path where to create the new template")
    author_cmd.add_argument("-n", "--name", help="Template name (defaults to directory name)")
    author_cmd.add_argument("-l", "--language", help="Main programming language of the template")
    author_cmd.add_argument("-d", "--description", help="Template description")
    author_cmd.set_defaults(func=_author_cmd)

    list_cmd = sub.add_parser("list", help="List available templates")
    list_cmd.add_argument("-v", "--verbose", action="store_true", help="Show detailed template information")
    list_cmd.add_argument(
        "-l",
        "--language",
        help="Filter by language (alias-aware; 'unknown' and 'unrecognized' are special)",
    )
    list_cmd.add_argument("--json", action="store_true", help="Emit machine-readable output")
    list_cmd.set_defaults(func=_list_cmd)

    init_cmd = sub.add_parser("init", help="Copy a template into an existing directory")
    init_cmd.add_argument("template", help="Template identity or name")
    init_cmd.add_argument("path", nargs="?", help="Target directory (default: current directory)")
    _add_sync_flags(init_cmd)
    init_cmd.set_defaults(func=_init_cmd)

    new_cmd = sub.add_parser("new", help="Create a new project from a template")
    new_cmd.add_argument("template", help="Template identity or name")
    new_cmd.add_argument("path", help="Directory to create the project in")
    _add_sync_flags(new_cmd)
    new_cmd.set_defaults(func=_new_cmd)

    languages_cmd = sub.add_parser("languages", help="Show known languages and their aliases")
    languages_cmd.add_argument("--json", action="store_true", help="Emit machine-readable output")
    languages_cmd.set_defaults(func=_languages_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if settings_module.SETTINGS_ERROR is not None:
        return _error(settings_module.SETTINGS_ERROR)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
