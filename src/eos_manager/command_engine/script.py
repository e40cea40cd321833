"""Script runner: executes multi-line scripts as ordered command sequences.

Commands run strictly one after another through the CommandExecutor, so
later commands see the device state left by earlier ones. Cancellation is
only observed between commands; the command in flight always completes.
"""
import asyncio
import logging
from typing import Optional

from ..utils.logging_config import timed
from .errors import DeviceBusy, EmptyScript
from .executor import CommandExecutor
from .schema import ScriptJob, ScriptRunSummary

logger = logging.getLogger(__name__)


def parse_script(script_text: str) -> ScriptJob:
    """Split script text into trimmed, non-empty command lines (order kept)."""
    return tuple(
        line.strip()
        for line in (script_text or "").splitlines()
        if line.strip()
    )


class ScriptRunner:
    """Run scripts on a device via a CommandExecutor."""

    def __init__(
        self,
        executor: CommandExecutor,
        stop_on_error: bool = False,
        min_command_interval: float = 0.0,
    ):
        """
        Initialize the runner.

        Args:
            executor: Executor every command is dispatched through
            stop_on_error: Default failure policy (False = continue on error)
            min_command_interval: Minimum seconds between two commands
        """
        self.executor = executor
        self.stop_on_error = stop_on_error
        self.min_command_interval = min_command_interval

    @timed("run_script")
    async def run_script(
        self,
        device_id: str,
        script_text: str,
        stop_on_error: Optional[bool] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScriptRunSummary:
        """
        Run every command of a script on one device, in order.

        Args:
            device_id: Target device
            script_text: One command per line; blank lines are ignored
            stop_on_error: Stop after the first failed command
                (defaults to the runner's policy)
            cancel_event: When set, no further commands are dispatched

        Returns:
            ScriptRunSummary with results in execution order

        Raises:
            InvalidRequest: Missing or unknown device
            EmptyScript: No executable lines in script_text
            DeviceBusy: Another caller holds the device when a command is due;
                its ``summary`` carries the commands already run
        """
        self.executor.resolve(device_id)
        job = parse_script(script_text)
        if not job:
            raise EmptyScript("Script contains no commands")

        if stop_on_error is None:
            stop_on_error = self.stop_on_error

        logger.info(
            f"Running script on {device_id}: {len(job)} commands "
            f"({'stop' if stop_on_error else 'continue'} on error)"
        )
        summary = ScriptRunSummary(device_id=device_id)

        for index, command in enumerate(job):
            if index and self.min_command_interval:
                await self._pause(cancel_event)

            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Script on {device_id} cancelled after {index} commands")
                summary.cancelled = True
                summary.skipped = list(job[index:])
                break

            try:
                result = await self.executor.execute(device_id, command)
            except DeviceBusy as e:
                logger.warning(f"Script on {device_id} interrupted at '{command}': device busy")
                summary.skipped = list(job[index:])
                e.summary = summary
                raise
            summary.results.append(result)

            if not result.success and stop_on_error:
                logger.warning(f"Stopping script on {device_id} at '{command}'")
                summary.stopped_on_error = True
                summary.skipped = list(job[index + 1:])
                break

        logger.info(
            f"Script on {device_id} finished: {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {len(summary.skipped)} skipped"
        )
        return summary

    async def _pause(self, cancel_event: Optional[asyncio.Event]) -> None:
        """Wait min_command_interval, returning early once cancel_event is set."""
        if cancel_event is None:
            await asyncio.sleep(self.min_command_interval)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.min_command_interval)
        except asyncio.TimeoutError:
            pass
