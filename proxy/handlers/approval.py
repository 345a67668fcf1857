"""
Operator approval gate for manual-approve mode.
"""
import asyncio
import logging
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Confirm

from errors import ApprovalRejected

logger = logging.getLogger(__name__)


class ApprovalGate:
    """Asks the operator on the console before a request reaches the upstream"""

    def __init__(
        self,
        enabled: bool = False,
        console: Optional[Console] = None,
        prompt: Optional[Callable[[str], bool]] = None,
    ):
        self.enabled = enabled
        self.console = console or Console()
        self._prompt = prompt or self._ask
        self._lock = asyncio.Lock()

    def _ask(self, summary: str) -> bool:
        self.console.print(f"[bold yellow]Incoming request:[/bold yellow] {summary}")
        return Confirm.ask("Accept incoming request?", console=self.console, default=True)

    async def wait(self, request_id: str, summary: str) -> None:
        """Block until the operator answers; raise ApprovalRejected on a no"""
        if not self.enabled:
            return

        # One prompt on the console at a time
        async with self._lock:
            logger.info(f"[{request_id}] Waiting for manual approval")
            approved = await asyncio.to_thread(self._prompt, summary)

        if not approved:
            logger.warning(f"[{request_id}] Request rejected by operator")
            raise ApprovalRejected("Request rejected by operator")
        logger.info(f"[{request_id}] Request approved by operator")
