"""CLI entry point for buildrun."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from buildrun.config import DEFAULT_CONFIG_FILE, BuildConfig, load_config
from buildrun.core.build import Build, BuildResult
from buildrun.core.plugins import PluginRegistry
from buildrun.core.properties import Properties
from buildrun.errors import BuildError
from buildrun.plugins import default_registry

EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_CONFIG_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildrun",
        description="Plugin-based task graph runner",
    )
    parser.add_argument("tasks", nargs="*", help="Tasks to run")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-c", "--config", default=None, help=f"Config file (default: ./{DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("-p", "--project-dir", default=None, help="Project directory")
    parser.add_argument("--plugin", action="append", default=[], help="Apply plugin by id (repeatable)")
    parser.add_argument(
        "-P", "--project-prop", action="append", default=[], metavar="KEY[=VALUE]", help="Set a project property"
    )
    parser.add_argument("--max-workers", type=int, default=None, help="Max tasks running at once")
    parser.add_argument("--fail-fast", action="store_true", help="Start no new task after the first failure")
    parser.add_argument("--dry-run", action="store_true", help="Print the task graph without executing")
    parser.add_argument("--list", action="store_true", help="List the tasks registered by the plugins")
    return parser


def _resolve_config(args: argparse.Namespace) -> BuildConfig:
    project_dir = Path(args.project_dir) if args.project_dir else Path.cwd()
    config_path = Path(args.config) if args.config else project_dir / DEFAULT_CONFIG_FILE
    if args.config or config_path.is_file():
        config = load_config(config_path)
    else:
        config = BuildConfig(project_name=project_dir.resolve().name, project_dir=project_dir)

    if args.project_dir:
        config.project_dir = project_dir
    try:
        config.properties.update(Properties.from_pairs(args.project_prop))
    except ValueError as e:
        raise BuildError(str(e)) from e
    for plugin_id in args.plugin:
        if plugin_id not in config.plugins:
            config.plugins.append(plugin_id)
    if args.max_workers is not None:
        if args.max_workers < 1:
            raise BuildError(f"--max-workers must be at least 1, got {args.max_workers}")
        config.max_workers = args.max_workers
    config.fail_fast = config.fail_fast or args.fail_fast
    config.dry_run = args.dry_run
    return config


def _list_tasks(build: Build) -> int:
    project = build.configure()
    print(f"Tasks of project {project.name!r}:")
    for task in project.tasks:
        group = f"[{task.group}] " if task.group else ""
        description = f" - {task.description}" if task.description else ""
        print(f"  {group}{task.name}{description}")
    return EXIT_OK


def _print_result(result: BuildResult) -> int:
    report = result.report
    summary = report.summary()
    print(f"\nDone in {report.duration_ms:.0f}ms")
    for state, count in summary["by_state"].items():
        print(f"  {state}: {count}")

    if not result.success:
        for failure in report.failures:
            print(f"\nFAILURE: {failure}")
        print("\nBUILD FAILED")
        return EXIT_BUILD_FAILED

    print("\nBUILD SUCCESSFUL")
    return EXIT_OK


async def _run(args: argparse.Namespace, plugins: PluginRegistry) -> int:
    config = _resolve_config(args)
    build = Build(config, plugins)

    if args.list:
        return _list_tasks(build)

    result = await build.run(args.tasks)
    if config.dry_run and build.graph is not None:
        print(f"Tasks: {len(build.graph)}")
        for i, level in enumerate(build.graph.levels):
            print(f"  Level {i}: {level}")
        print("\nDry run: no tasks executed.")
        return EXIT_OK
    return _print_result(result)


def main(argv: list[str] | None = None, plugins: PluginRegistry | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    if not args.tasks and not args.list:
        parser.print_help()
        return EXIT_CONFIG_ERROR

    try:
        return asyncio.run(_run(args, plugins or default_registry()))
    except BuildError as e:
        print(f"\nFAILURE: {e}", file=sys.stderr)
        print("\nBUILD FAILED", file=sys.stderr)
        return EXIT_CONFIG_ERROR


def run() -> None:
    sys.exit(main())
