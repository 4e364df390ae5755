"""
The poll-process-submit loop.

    INIT --start()--> RUNNING --stop() / fatal--> STOPPED

start() fetches the prompt template once; if that fails the loop goes straight
to STOPPED. While RUNNING each cycle fetches the pending token ids, handles them
one at a time in queue order, then sleeps for poll_interval_s. A failing item is
logged and skipped; it never stops the cycle. Whether a failed id fetch skips
the cycle or stops the loop is set by IdFetchPolicy.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from agent.config import IdFetchPolicy
from agent.contract import ContractClient, TokenId
from agent.errors import BotError
from agent.receipt import TransactionReceipt, extract_token_id
from agent.submitter import ResponseSubmitter
from inference.client import CompletionClient, build_query

logger = logging.getLogger(__name__)


class LoopStatus(str, enum.Enum):
    INIT = "init"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class CycleReport:
    ids: List[TokenId] = field(default_factory=list)
    succeeded: List[TokenId] = field(default_factory=list)
    failed: List[TokenId] = field(default_factory=list)
    fetch_failed: bool = False


class PollLoop:
    def __init__(
        self,
        contract: ContractClient,
        completions: CompletionClient,
        submitter: ResponseSubmitter,
        *,
        poll_interval_s: float = 5.0,
        id_fetch_policy: IdFetchPolicy = IdFetchPolicy.SKIP,
        sleep: Optional[Callable[[float], object]] = None,
    ) -> None:
        self._contract = contract
        self._completions = completions
        self._submitter = submitter
        self.poll_interval_s = poll_interval_s
        self.id_fetch_policy = id_fetch_policy
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait

        self.status = LoopStatus.INIT
        self.stop_reason: Optional[str] = None
        self.fatal = False
        self.prompt: Optional[str] = None
        self.cycles = 0

    # ── state transitions ────────────────────────────────────────────────────

    def start(self) -> LoopStatus:
        """Fetch the prompt template and enter RUNNING, or STOPPED if it cannot be read."""
        if self.status is not LoopStatus.INIT:
            return self.status
        try:
            self.prompt = self._contract.fetch_prompt()
        except BotError as exc:
            logger.error("prompt fetch failed, not starting: %s", exc)
            self.stop(f"prompt unavailable: {exc}", fatal=True)
            return self.status
        logger.info("prompt: %s", self.prompt)
        self.status = LoopStatus.RUNNING
        return self.status

    def stop(self, reason: str = "stop requested", fatal: bool = False) -> None:
        if self.status is not LoopStatus.STOPPED:
            self.stop_reason = reason
            self.fatal = fatal
        self.status = LoopStatus.STOPPED
        self._stop_event.set()

    @property
    def running(self) -> bool:
        return self.status is LoopStatus.RUNNING

    # ── loop ─────────────────────────────────────────────────────────────────

    def run(self, max_cycles: Optional[int] = None) -> LoopStatus:
        """
        Poll until stopped. max_cycles bounds the number of cycles (the loop
        stays RUNNING afterwards and can be resumed); no sleep follows the last one.
        """
        if self.status is LoopStatus.INIT:
            self.start()

        done = 0
        while self.running:
            self.run_cycle()
            done += 1
            if max_cycles is not None and done >= max_cycles:
                break
            if not self.running:
                break
            self._sleep(self.poll_interval_s)
        return self.status

    def run_cycle(self) -> CycleReport:
        report = CycleReport()
        self.cycles += 1
        try:
            report.ids = self._contract.fetch_pending_ids()
        except BotError as exc:
            report.fetch_failed = True
            if self.id_fetch_policy is IdFetchPolicy.ABORT:
                logger.error("pending id fetch failed, stopping: %s", exc)
                self.stop(f"pending ids unavailable: {exc}", fatal=True)
            else:
                logger.warning("pending id fetch failed, retrying next cycle: %s", exc)
            return report

        logger.info("Monitor... %d pending: %s", len(report.ids), report.ids)
        for token_id in report.ids:
            if self._process_guarded(token_id):
                report.succeeded.append(token_id)
            else:
                report.failed.append(token_id)
        return report

    def _process_guarded(self, token_id: TokenId) -> bool:
        try:
            self.process_item(token_id)
        except BotError as exc:
            kind = "timeout" if exc.timed_out else type(exc).__name__
            logger.error("token %s: %s failed (%s): %s", token_id, exc.operation, kind, exc.detail)
            return False
        except Exception:
            logger.exception("token %s: unhandled error", token_id)
            return False
        return True

    def process_item(self, token_id: TokenId) -> TransactionReceipt:
        """Fetch, complete, and answer a single pending item. Raises on any step failing."""
        if self.prompt is None:
            raise RuntimeError("process_item called before the prompt was fetched")

        item = self._contract.fetch_item(token_id)
        query = build_query(self.prompt, item.description)
        answer = self._completions.complete(query)
        logger.info("query: %s\nanswer: %s", item.description, answer)

        receipt = self._submitter.submit(token_id, answer)
        logger.info("tx: %s", receipt.tx_hash)

        confirmed = extract_token_id(receipt)
        if confirmed is None:
            logger.warning("tx %s: no wasm token_id attribute in receipt", receipt.tx_hash)
        else:
            logger.info("Token ID: %s", confirmed)
        return receipt
