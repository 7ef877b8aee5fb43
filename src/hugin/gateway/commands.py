"""Slash command definitions for the `server` command group."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hugin.gateway.router import CommandRouter
    from hugin.lifecycle.controller import ServerLifecycleController

# Discord application command option types
_SUB_COMMAND = 1
_CHAT_INPUT = 1

SERVER_GROUP = "server"

SERVER_SUBCOMMANDS: dict[str, str] = {
    "status": "Current server status",
    "logs": "Server logs",
    "restart": "Restart the server",
}


def server_command_definitions() -> list[dict[str, Any]]:
    """Application command payload for a guild bulk overwrite."""
    return [
        {
            "name": SERVER_GROUP,
            "description": "Server management",
            "type": _CHAT_INPUT,
            "options": [
                {"type": _SUB_COMMAND, "name": name, "description": description}
                for name, description in SERVER_SUBCOMMANDS.items()
            ],
        }
    ]


def register_server_commands(router: CommandRouter, controller: ServerLifecycleController) -> None:
    """Bind the server subcommands to controller operations."""
    router.on_command(f"{SERVER_GROUP} status", controller.get_status)
    router.on_command(f"{SERVER_GROUP} logs", controller.get_logs)
    router.on_command(f"{SERVER_GROUP} restart", controller.restart)


def command_name(data: dict[str, Any]) -> str:
    """Flatten interaction data into "group subcommand" form.

    {"name": "server", "options": [{"type": 1, "name": "status"}]} -> "server status"
    """
    parts = [data.get("name", "")]
    options = data.get("options") or []
    while options and options[0].get("type") in (1, 2):  # SUB_COMMAND, SUB_COMMAND_GROUP
        parts.append(options[0].get("name", ""))
        options = options[0].get("options") or []
    return " ".join(parts)
