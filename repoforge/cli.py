"""Command-line front end for the project generator.

Usage::

    repoforge my-project
    repoforge my-project --apps admin,mobile --deploy none --no-install
    python -m repoforge my-project --directory ~/code
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .config import (
    ALL_UNITS,
    BASELINE_UNIT,
    DeploymentTarget,
    GenerationConfig,
    GeneratorSettings,
    UnitId,
    validate_project_name,
)
from .events import GenerationResult, ProgressEvent, Stage, StageStatus
from .generator import ProjectGenerator
from .utils import (
    STAGE_COLORS,
    console,
    print_error,
    print_rule,
    print_success,
    print_summary_table,
    print_warning,
)

# Conventional exit status after SIGINT.
EXIT_INTERRUPTED = 130

_STATUS_STYLES: dict[StageStatus, tuple[str, str]] = {
    StageStatus.STARTED: ("...", "dim"),
    StageStatus.SUCCEEDED: ("ok", "green"),
    StageStatus.WARNED: ("warn", "yellow"),
    StageStatus.FAILED: ("FAILED", "bold red"),
}


class ConsoleReporter:
    """Renders generator progress events as one Rich line per event."""

    def __init__(self, out: Console | None = None) -> None:
        self.console = out or console

    def __call__(self, event: ProgressEvent) -> None:
        if event.stage == Stage.DONE:
            return
        label, style = _STATUS_STYLES[event.status]
        color = STAGE_COLORS.get(event.stage.value, "white")
        self.console.print(
            f"  [{color}]{event.stage.value:<12}[/{color}] "
            f"[{style}]{label:<6}[/{style}] {escape(event.detail)}",
            highlight=False,
        )


def parse_apps(value: str) -> frozenset[UnitId]:
    """Parse a comma-separated app list; the baseline app is always added."""
    units = {BASELINE_UNIT}
    for raw in value.split(","):
        name = raw.strip().lower()
        if not name:
            continue
        try:
            units.add(UnitId(name))
        except ValueError:
            choices = ", ".join(u.value for u in ALL_UNITS)
            raise argparse.ArgumentTypeError(
                f"Unknown app '{name}'. Choose from: {choices}"
            ) from None
    return frozenset(units)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoforge",
        description="Create a new project from the monorepo template",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  repoforge my-project\n"
            "  repoforge my-project --apps admin,mobile --deploy none\n"
            "  repoforge --config project.json\n"
        ),
    )
    parser.add_argument("project_name", nargs="?", help="Name of the new project")
    parser.add_argument(
        "--apps",
        type=parse_apps,
        default=frozenset({BASELINE_UNIT, UnitId.ADMIN}),
        help="Comma-separated apps to include: admin, mobile, api (web is always included; "
        "default: admin)",
    )
    parser.add_argument(
        "--deploy",
        choices=[t.value for t in DeploymentTarget],
        default=DeploymentTarget.GCP.value,
        help="Deployment target (default: gcp)",
    )
    parser.add_argument(
        "--no-install", action="store_true", help="Skip installing dependencies"
    )
    parser.add_argument(
        "--no-git", action="store_true", help="Skip creating the initial git commit"
    )
    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Parent directory for the project (default: current directory)",
    )
    parser.add_argument("--template-url", default=None, help="Template git URL")
    parser.add_argument("--branch", default=None, help="Template branch")
    parser.add_argument(
        "--fetch-strategy", choices=["git", "archive"], default=None,
        help="Retrieve the template with git (default) or as a tarball",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Load the project configuration from a JSON file",
    )
    return parser


def build_settings(args: argparse.Namespace) -> GeneratorSettings:
    settings = GeneratorSettings.from_env()
    overrides: dict[str, object] = {}
    if args.template_url:
        overrides["template_url"] = args.template_url
    if args.branch:
        overrides["template_branch"] = args.branch
    if args.fetch_strategy:
        overrides["fetch_strategy"] = args.fetch_strategy
    if args.no_git:
        overrides["initialize_repository"] = False
    return settings.model_copy(update=overrides)


def build_config(args: argparse.Namespace) -> GenerationConfig:
    if args.config is not None:
        return GenerationConfig.load(args.config)
    return GenerationConfig.for_project(
        args.project_name,
        parent=Path(args.directory).expanduser() if args.directory else None,
        selected_units=args.apps,
        deployment_target=DeploymentTarget(args.deploy),
        install_dependencies=not args.no_install,
    )


def print_next_steps(config: GenerationConfig, result: GenerationResult) -> None:
    console.print("\n[bold blue]Next steps:[/bold blue]")
    steps = [f"cd {config.project_path}"]
    if not result.dependencies_installed:
        steps.append("pnpm install")
    if config.includes(UnitId.MOBILE):
        steps.append("pnpm mobile:start  # Start Expo dev server")
    steps.append("pnpm dev           # Start development servers")
    if config.deployment_target == DeploymentTarget.GCP:
        steps.append("# Follow README.md for GCP deployment setup")
    for step in steps:
        console.print(f"  [dim]{step}[/dim]")
    console.print()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is None:
        problem = validate_project_name(args.project_name or "")
        if problem is not None:
            print_error(f"Error: {problem}")
            console.print("[dim]  repoforge my-project[/dim]")
            return 1

    try:
        config = build_config(args)
        settings = build_settings(args)
    except ValidationError as exc:
        for error in exc.errors():
            print_error(f"Error: {escape(error['msg'])}")
        return 1
    except (OSError, ValueError) as exc:
        print_error(f"Error: {escape(str(exc))}")
        return 1

    console.print(
        Panel(
            f"[bold bright_cyan]repoforge[/bold bright_cyan]\n"
            f"Project  : {config.project_name}\n"
            f"Location : {config.project_path}",
            title="[bold]New Project[/bold]",
            border_style="bright_cyan",
        )
    )
    print_summary_table(
        {
            "Apps": ", ".join(u.value for u in config.ordered_units()),
            "Deployment": config.deployment_target.value,
            "Install deps": "Yes" if config.install_dependencies else "No",
            "Template": f"{settings.template_url} ({settings.template_branch})",
        },
        title="Configuration",
    )

    print_rule("Generating")
    generator = ProjectGenerator(settings, listener=ConsoleReporter())
    try:
        result = asyncio.run(generator.run(config))
    except KeyboardInterrupt:
        print_error("\nInterrupted -- the project directory may be incomplete.")
        return EXIT_INTERRUPTED

    console.print()
    for warning in result.warnings:
        print_warning(escape(warning))

    if result.succeeded:
        print_success("Project created successfully!")
        print_next_steps(config, result)
    else:
        stage = result.failure_stage.value if result.failure_stage else "unknown"
        print_error(f"Failed to create project (stage: {stage})")
        print_error(escape(result.message))

    return result.exit_code
