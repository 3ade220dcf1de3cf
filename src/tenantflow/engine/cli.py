#!/usr/bin/env python
"""
CLI commands for inspecting and rendering tenant configuration.
"""

import json
from pathlib import Path
from typing import Any

import click

from tenantflow.engine import get_version
from tenantflow.engine.logging import setup_logging
from tenantflow.engine.tenant.artifacts import generate_env_map, generate_style_sheet
from tenantflow.engine.tenant.exceptions import TenantConfigError
from tenantflow.engine.tenant.merge import resolve
from tenantflow.engine.tenant.models import ConfigTree
from tenantflow.engine.tenant.registry import WorkflowRegistry
from tenantflow.engine.tenant.validation import validate_tree


def _load_json(path: str | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object")
    return data


def _provision(template: str, tenant_id: str, overrides_path: str | None) -> ConfigTree:
    registry = WorkflowRegistry()
    try:
        registry.catalog.require(template)
        return registry.create_from_template(
            tenant_id, template, _load_json(overrides_path), overwrite=True
        )
    except TenantConfigError as e:
        raise click.ClickException(e.message) from e


def _provision_options(func: Any) -> Any:
    func = click.option(
        "--overrides",
        "overrides_path",
        type=click.Path(exists=True, dir_okay=False),
        help="JSON file with override values",
    )(func)
    func = click.option("--tenant-id", required=True, help="Tenant identifier")(func)
    func = click.option("--template", default="demo", show_default=True, help="Template name")(
        func
    )
    return func


@click.group()
@click.version_option(get_version(), prog_name="tenantflow")
def cli() -> None:
    """Tenantflow tenant configuration CLI."""
    setup_logging()


@cli.command()
def templates() -> None:
    """List the built-in templates."""
    registry = WorkflowRegistry()
    for name in registry.catalog.names():
        click.echo(name)


@cli.command("render-css")
@_provision_options
def render_css(template: str, tenant_id: str, overrides_path: str | None) -> None:
    """Print the tenant style sheet."""
    tree = _provision(template, tenant_id, overrides_path)
    click.echo(generate_style_sheet(tree.branding))


@cli.command()
@_provision_options
def show(template: str, tenant_id: str, overrides_path: str | None) -> None:
    """Print the resolved tenant configuration as a JSON document."""
    tree = _provision(template, tenant_id, overrides_path)
    click.echo(json.dumps(tree.to_document(), indent=2))


@cli.command("render-env")
@_provision_options
@click.option("--export", "as_export", is_flag=True, help="Prefix lines with 'export'")
def render_env(template: str, tenant_id: str, overrides_path: str | None, as_export: bool) -> None:
    """Print the tenant environment variables."""
    tree = _provision(template, tenant_id, overrides_path)
    prefix = "export " if as_export else ""
    for key, value in generate_env_map(tree).items():
        click.echo(f"{prefix}{key}={json.dumps(value)}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def validate(path: str) -> None:
    """Validate a tenant document (resolved over the baseline first)."""
    document = _load_json(path)
    registry = WorkflowRegistry()
    try:
        tree = resolve(registry.baseline, None, document, tenant_id=document.get("id"))
    except TenantConfigError as e:
        raise click.ClickException(e.message) from e

    result = validate_tree(tree)
    if result.valid:
        click.echo("valid")
        return
    for error in result.errors:
        click.echo(f"- {error}", err=True)
    raise SystemExit(1)


if __name__ == "__main__":
    cli()
