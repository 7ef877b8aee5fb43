"""Hugin application and command line entry point.

Usage:
    hugin                    # serve the interactions endpoint
    hugin serve              # same
    hugin install-commands   # install slash commands in the guild and exit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hugin import __version__
from hugin.config import HuginConfig, LoggingConfig, load_config
from hugin.errors import ConfigurationError, GatewayError, HuginError
from hugin.gateway.commands import register_server_commands, server_command_definitions
from hugin.gateway.discord_rest import DiscordRestClient, DiscordRestConfig
from hugin.gateway.interactions import InteractionGateway
from hugin.gateway.interactions import router as interactions_router
from hugin.gateway.router import CommandRouter
from hugin.infra import ContainerAPI, DockerClient
from hugin.lifecycle import ServerLifecycleController
from hugin.logging import setup_logging
from hugin.logging_schema import LogEvent
from hugin.registry import ServerRegistry
from hugin.runtime import ContainerRuntimeClient, DockerRuntimeClient

logger = logging.getLogger(__name__)


def build_rest_client(config: HuginConfig) -> DiscordRestClient:
    return DiscordRestClient(
        DiscordRestConfig(
            token=config.discord_token,
            application_id=config.discord_application_id,
            base_url=config.discord.api_base_url,
            timeout=config.discord.timeout,
        )
    )


async def resolve_application(
    config: HuginConfig, rest: DiscordRestClient | None = None
) -> HuginConfig:
    """Fill in the application id and public key from the bot token.

    Values present in the configuration file are kept.

    Raises:
        GatewayError: Discord could not be asked or answered unexpectedly.
    """
    if config.discord_application_id is not None and config.discord_public_key is not None:
        return config

    rest = rest or build_rest_client(config)
    try:
        application = await rest.get_current_application()
    finally:
        await rest.close()

    try:
        application_id = config.discord_application_id or int(application["id"])
        public_key = config.discord_public_key or str(application["verify_key"])
    except (KeyError, TypeError, ValueError) as e:
        raise GatewayError("Discord application payload is missing id or verify_key") from e

    logger.info(
        "Discord application resolved",
        extra={"event": LogEvent.APPLICATION_RESOLVED, "application_id": application_id},
    )
    return config.model_copy(
        update={"discord_application_id": application_id, "discord_public_key": public_key}
    )


def create_app(
    config: HuginConfig,
    *,
    runtime: ContainerRuntimeClient | None = None,
    rest: DiscordRestClient | None = None,
) -> FastAPI:
    """Wire registry, runtime, controller and gateway into a FastAPI app.

    Args:
        config: Loaded configuration
        runtime: Container runtime override (tests)
        rest: Discord REST client override (tests)

    Raises:
        ConfigurationError: If the public key has not been resolved.
    """
    if config.discord_public_key is None:
        raise ConfigurationError(
            "Discord public key is not resolved; call resolve_application first"
        )

    docker: DockerClient | None = None
    if runtime is None:
        docker = DockerClient(config.docker_endpoint, timeout=config.docker.api_timeout)
        runtime = DockerRuntimeClient(ContainerAPI(docker))
    rest = rest or build_rest_client(config)

    registry = ServerRegistry.from_config(config)
    controller = ServerLifecycleController(registry, runtime, config.docker)
    router = CommandRouter()
    register_server_commands(router, controller)
    gateway = InteractionGateway(config.discord_public_key, config.guild_id, router, rest)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(
            "Starting Hugin",
            extra={
                "event": LogEvent.APP_STARTED,
                "version": __version__,
                "servers": [m.name for m in registry],
            },
        )
        yield
        logger.info("Hugin stopped", extra={"event": LogEvent.APP_STOPPED})
        await rest.close()
        if docker is not None:
            await docker.close()

    app = FastAPI(
        title="Hugin",
        description="Discord bot for container server management",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.gateway = gateway
    app.state.controller = controller
    app.include_router(interactions_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check."""
        return {"status": "ok", "version": __version__}

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


async def install_commands(config: HuginConfig, rest: DiscordRestClient | None = None) -> None:
    """Register the slash commands in the configured guild."""
    rest = rest or build_rest_client(config)
    try:
        installed = await rest.bulk_overwrite_guild_commands(
            config.guild_id, server_command_definitions()
        )
    finally:
        await rest.close()
    logger.info(
        "Commands installed",
        extra={
            "event": LogEvent.COMMANDS_INSTALLED,
            "guild_id": config.guild_id,
            "commands": [c.get("name") for c in installed],
        },
    )


def serve(config: HuginConfig) -> None:
    """Run the interactions endpoint until SIGINT/SIGTERM.

    uvicorn stops accepting connections on the signal and waits for
    in-flight requests, including running command tasks.
    """
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="hugin", description="Hugin Discord bot")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("serve", help="Serve the Discord interactions endpoint (default)")
    subparsers.add_parser(
        "install-commands",
        aliases=["installCommands"],
        help="Install slash commands in the configured guild and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = _parse_args(argv)
    setup_logging(LoggingConfig())

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(e.message, extra={"event": LogEvent.CONFIG_ERROR})
        return 1

    try:
        config = asyncio.run(resolve_application(config))
        if args.command in ("install-commands", "installCommands"):
            logger.info("Installing commands...")
            asyncio.run(install_commands(config))
            return 0
    except HuginError as e:
        logger.error(
            e.message,
            extra={"event": LogEvent.STARTUP_FAILED, "error_code": e.code.value},
        )
        return 1

    logger.info("Starting Discord bot...")
    serve(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
