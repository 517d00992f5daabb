from __future__ import annotations

import typer
import yaml

from expirybot.config import Runtime, create_runtime
from expirybot.domains import add_domain, read_domains
from expirybot.engine import check_domains
from expirybot.logging_ import configure_logging

NO_DOMAINS_MESSAGE = (
    "No domains configured to check, add a new domain with: "
    "expirybot add domain.com[,threshold]"
)


def _load_domains(runtime: Runtime, default_threshold: int):
    path = runtime.paths.domains_file
    if not path.exists():
        typer.echo(NO_DOMAINS_MESSAGE)
        raise typer.Exit(code=0)

    try:
        domains = read_domains(path, default_threshold)
    except (OSError, UnicodeDecodeError) as exc:
        typer.echo(f"Error reading domains file: {exc}")
        raise typer.Exit(code=1)

    if not domains:
        typer.echo(NO_DOMAINS_MESSAGE)
        raise typer.Exit(code=0)

    return domains


def _run_check(runtime: Runtime, threshold: int | None = None) -> None:
    settings = runtime.settings
    default_threshold = threshold or settings.default_threshold
    domains = _load_domains(runtime, default_threshold)

    # Per-domain failures are reported as lines; the exit code stays 0.
    check_domains(
        domains,
        default_threshold,
        max_concurrent=settings.max_concurrent_checks,
        timeout=settings.check_timeout,
    )


app = typer.Typer(add_completion=False)


@app.callback(invoke_without_command=True)
def _callback(
    ctx: typer.Context,
    file: str | None = typer.Option(
        None,
        "--file",
        "-f",
        help="Path to domains file (overrides the default config file)",
        envvar="EXPIRYBOT_FILE",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log check progress to stderr"
    ),
):
    """Report domains whose TLS certificate expires soon.

    Runs the check when no command is given.
    """
    configure_logging(verbose)
    try:
        runtime = create_runtime(domains_file=file)
    except (ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"invalid settings: {exc}")
    ctx.obj = runtime

    if ctx.invoked_subcommand is None:
        _run_check(runtime)


@app.command("check")
def check(
    ctx: typer.Context,
    threshold: int | None = typer.Option(
        None,
        "--threshold",
        "-t",
        min=1,
        help="Default threshold in days for domains without their own",
    ),
):
    """Check certificate expiry for every configured domain.

    Prints one line per failing domain and per certificate expiring within
    its threshold; healthy certificates print nothing.
    """
    _run_check(ctx.obj, threshold=threshold)


@app.command("add")
def add(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="domain.com[,threshold]"),
):
    """Add a domain to the config file, or update its threshold."""
    runtime = ctx.obj
    default_threshold = runtime.settings.default_threshold

    try:
        result = add_domain(runtime.paths.config_file, domain, default_threshold)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    except OSError as exc:
        typer.echo(f"Error writing config file: {exc}")
        raise typer.Exit(code=1)

    if result.invalid_threshold is not None:
        typer.echo(
            f"Invalid threshold value: {result.invalid_threshold}. "
            f"Using default: {default_threshold} days"
        )

    verb = "Updated" if result.updated else "Added"
    typer.echo(
        f"{verb} domain {result.domain.name} with threshold {result.domain.threshold} days"
    )


@app.command("domains")
def domains(ctx: typer.Context):
    """List configured domains."""
    runtime = ctx.obj
    for d in _load_domains(runtime, runtime.settings.default_threshold):
        typer.echo(f"{d.name}\tthreshold={d.threshold}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
