"""
Agent Orange CLI — agent-orange serve | relay | mode | pending
"""
import asyncio
import json

import click

from agent_orange.config.settings import Settings, load_settings
from agent_orange.core.exceptions import ValidationError
from agent_orange.core.structured_logger import setup_logging


def _load(ctx: click.Context) -> Settings:
    """Load settings once per invocation and configure logging."""
    if ctx.obj.get("settings") is None:
        try:
            settings = load_settings(ctx.obj.get("config_path"))
        except (FileNotFoundError, ValueError) as e:
            raise click.ClickException(str(e)) from e
        setup_logging(settings.logging.level, settings.logging.output_file)
        ctx.obj["settings"] = settings
    return ctx.obj["settings"]


@click.group()
@click.version_option(package_name="agent-orange")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML config file (environment variables fill in the rest)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Agent Orange — route agent approval prompts to voice or chat."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the HTTP API and voice-skill webhook."""
    from agent_orange.core.factories import create_services
    from agent_orange.interfaces.web import WebInterface

    settings = _load(ctx)

    async def _serve() -> None:
        services = create_services(settings)
        try:
            await WebInterface(services, settings).start()
        finally:
            await services.aclose()

    click.echo(f"Serving on http://{settings.web.host}:{settings.web.port}")
    asyncio.run(_serve())


@cli.command()
@click.pass_context
def relay(ctx: click.Context) -> None:
    """Run the Telegram chat relay."""
    from agent_orange.interfaces.telegram import TelegramRelay
    from agent_orange.relay import AgentRunner, CommandGuard, PendingLock

    settings = _load(ctx)
    if settings.relay is None:
        raise click.ClickException(
            "relay is not configured. Set relay.bot_token and relay.authorized_user_id "
            "(or AGENT_ORANGE_RELAY__BOT_TOKEN / AGENT_ORANGE_RELAY__AUTHORIZED_USER_ID)."
        )
    config = settings.relay
    guard = CommandGuard(
        AgentRunner(config.agent_binary, config.project_dir),
        PendingLock(config.lock_file),
    )
    TelegramRelay(guard, config).run()


@cli.command()
@click.argument("value", required=False)
@click.pass_context
def mode(ctx: click.Context, value: str | None) -> None:
    """Show the notification mode, or set it to VALUE."""
    from agent_orange.core.factories import create_services

    settings = _load(ctx)

    async def _run() -> str:
        services = create_services(settings)
        try:
            if value is None:
                return (await services.service.get_mode()).value
            return (await services.service.set_mode(value)).value
        finally:
            await services.aclose()

    try:
        click.echo(asyncio.run(_run()))
    except ValidationError as e:
        raise click.ClickException(e.message) from e


@cli.command()
@click.pass_context
def pending(ctx: click.Context) -> None:
    """Print the current approval request as JSON."""
    from agent_orange.core.factories import create_services

    settings = _load(ctx)

    async def _run() -> dict:
        services = create_services(settings)
        try:
            return await services.service.status()
        finally:
            await services.aclose()

    click.echo(json.dumps(asyncio.run(_run()), indent=2))


if __name__ == "__main__":
    cli()
