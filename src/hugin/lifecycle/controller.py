"""Server lifecycle controller: status, logs and supervised restart."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hugin.errors import GatewayError
from hugin.gateway.interface import Attachment, PanelField, Reply, Responder, StatusPanel
from hugin.lifecycle.restart import (
    OUTCOME_MESSAGES,
    RestartAction,
    RestartState,
    Transition,
    transition,
)
from hugin.logging_schema import LogEvent
from hugin.metrics import HUGIN_RESTART_OUTCOMES
from hugin.models import ContainerObservation, LogBundle, RestartOutcome, ServerMapping
from hugin.runtime.lock import ContainerLocks
from hugin.runtime.result import attempt

if TYPE_CHECKING:
    from hugin.config import DockerConfig
    from hugin.registry import ServerRegistry
    from hugin.runtime.client import ContainerRuntimeClient

logger = logging.getLogger(__name__)

NO_SERVER_MESSAGE = "No server is assigned to this channel."
NO_LOGS_MESSAGE = "No logs available."
STATUS_PENDING_MESSAGE = "Getting server status..."
LOGS_PENDING_MESSAGE = "Getting server logs..."
# Discord rejects an edit with attachments and an empty body
ZERO_WIDTH_SPACE = "\u200b"


class ServerLifecycleController:
    """Executes server commands for the channel they were issued in.

    Every operation resolves the channel first; unknown channels get an
    informational reply and cause no runtime calls.
    """

    def __init__(
        self,
        registry: ServerRegistry,
        runtime: ContainerRuntimeClient,
        docker_config: DockerConfig,
        locks: ContainerLocks | None = None,
    ) -> None:
        self._registry = registry
        self._runtime = runtime
        self._grace_seconds = docker_config.stop_grace_seconds
        self._kill_signal = docker_config.kill_signal
        self._locks = locks or ContainerLocks()

    async def _resolve(self, channel_id: int, responder: Responder) -> ServerMapping | None:
        mapping = self._registry.resolve(channel_id)
        if mapping is None:
            logger.info(
                "No server assigned to channel",
                extra={"event": LogEvent.SERVER_NOT_FOUND, "channel_id": channel_id},
            )
            await responder.edit_response(Reply(content=NO_SERVER_MESSAGE))
        return mapping

    # =========================================================================
    # Status
    # =========================================================================

    async def get_status(self, channel_id: int, responder: Responder) -> bool | None:
        """Post an Online/Offline panel for the channel's server.

        Runtime errors are logged and displayed as Offline.

        Returns:
            True if running, False if offline, None if no server is assigned.
        """
        await responder.respond(Reply(content=STATUS_PENDING_MESSAGE))

        mapping = await self._resolve(channel_id, responder)
        if mapping is None:
            return None

        result = await attempt(
            "inspect", self._runtime.inspect(mapping.container), container=mapping.container
        )
        online = result.ok and result.value.running

        panel = StatusPanel(
            title=mapping.name,
            fields=[PanelField(name="Status", value="Online" if online else "Offline")],
        )
        await responder.edit_response(Reply(panel=panel))
        return online

    # =========================================================================
    # Logs
    # =========================================================================

    async def get_logs(self, channel_id: int, responder: Responder) -> LogBundle | None:
        """Post the server's stdout/stderr as file attachments.

        Returns:
            The fetched logs (empty when unavailable), None if no server is assigned.
        """
        await responder.respond(Reply(content=LOGS_PENDING_MESSAGE))

        mapping = await self._resolve(channel_id, responder)
        if mapping is None:
            return None

        logs = LogBundle()
        inspected = await attempt(
            "inspect", self._runtime.inspect(mapping.container), container=mapping.container
        )
        if inspected.ok:
            container_id = inspected.value.id
            fetched = await attempt(
                "logs", self._runtime.fetch_logs(container_id), container=mapping.container
            )
            if fetched.ok:
                logs = fetched.value

        await responder.edit_response(render_logs(logs))
        return logs

    # =========================================================================
    # Restart
    # =========================================================================

    async def restart(self, channel_id: int, responder: Responder) -> RestartOutcome | None:
        """Restart the channel's server with stop -> kill -> start escalation.

        Only one restart per container runs at a time; a concurrent request
        is rejected with IN_PROGRESS instead of queueing.

        Returns:
            The terminal outcome, or None if no server is assigned.
        """
        await responder.respond(Reply(content=STATUS_PENDING_MESSAGE))

        mapping = await self._resolve(channel_id, responder)
        if mapping is None:
            return None

        if self._locks.is_locked(mapping.container):
            logger.info(
                "Restart already in progress",
                extra={
                    "event": LogEvent.RESTART_REJECTED,
                    "server": mapping.name,
                    "container": mapping.container,
                },
            )
            outcome = RestartOutcome.IN_PROGRESS
        else:
            async with self._locks.get(mapping.container):
                outcome = await self._run_restart(mapping, responder)

        HUGIN_RESTART_OUTCOMES.labels(outcome=outcome.value).inc()
        logger.info(
            "Restart finished",
            extra={
                "event": LogEvent.RESTART_COMPLETED,
                "server": mapping.name,
                "container": mapping.container,
                "outcome": outcome.value,
            },
        )
        await self._notify(mapping, responder, OUTCOME_MESSAGES[outcome])
        return outcome

    async def _run_restart(self, mapping: ServerMapping, responder: Responder) -> RestartOutcome:
        """Drive the state machine to a terminal outcome."""
        last: ContainerObservation | None = None
        was_offline = False
        step: Transition = transition(RestartState.IDLE, None)

        while not step.is_terminal:
            logger.debug(
                "Restart step",
                extra={
                    "event": LogEvent.RESTART_STEP,
                    "server": mapping.name,
                    "state": step.state.value,
                    "action": step.action.value,
                },
            )
            if step.progress:
                await self._notify(mapping, responder, step.progress)

            last = await self._execute(step.action, mapping, last)

            # A failed verification keeps the last successful observation
            running = last.running if last is not None else None
            if step.state is RestartState.CHECKING_RUNNING and running is False:
                was_offline = True

            step = transition(step.state, running, was_offline=was_offline)

        if step.outcome is None:
            raise RuntimeError(f"Restart ended in {step.state.value} without an outcome")
        return step.outcome

    async def _notify(self, mapping: ServerMapping, responder: Responder, message: str) -> None:
        """Edit the restart message. Delivery failures never stop a restart."""
        try:
            await responder.edit_response(Reply(content=message))
        except GatewayError as e:
            logger.warning(
                "Could not deliver restart message",
                extra={
                    "event": LogEvent.RESPONSE_FAILED,
                    "server": mapping.name,
                    "container": mapping.container,
                    "error_message": e.message,
                },
            )

    async def _execute(
        self,
        action: RestartAction,
        mapping: ServerMapping,
        last: ContainerObservation | None,
    ) -> ContainerObservation | None:
        """Run one runtime call and return the latest known observation.

        Mutating calls are fire-and-verify: their result is logged by
        attempt() and otherwise ignored.
        """
        target = last.id if last is not None else mapping.container

        if action is RestartAction.INSPECT:
            result = await attempt(
                "inspect", self._runtime.inspect(mapping.container), container=mapping.container
            )
            return result.value if result.ok else last

        if action is RestartAction.STOP:
            await attempt(
                "stop",
                self._runtime.stop(target, self._grace_seconds),
                container=mapping.container,
            )
        elif action is RestartAction.KILL:
            await attempt(
                "kill", self._runtime.kill(target, self._kill_signal), container=mapping.container
            )
        elif action is RestartAction.START:
            await attempt("start", self._runtime.start(target), container=mapping.container)

        return last


def render_logs(logs: LogBundle) -> Reply:
    """Build the logs reply: one attachment per non-empty stream."""
    if logs.is_empty:
        return Reply(content=NO_LOGS_MESSAGE)

    attachments = []
    if logs.stdout is not None:
        attachments.append(Attachment(filename="stdout.txt", content=logs.stdout.encode("utf-8")))
    if logs.stderr is not None:
        attachments.append(Attachment(filename="stderr.txt", content=logs.stderr.encode("utf-8")))
    return Reply(content=ZERO_WIDTH_SPACE, attachments=attachments)
