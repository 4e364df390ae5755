"""Shared fakes: an in-memory contract backend and an OpenAI-shaped client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest

from agent.contract import ContractClient
from agent.poll_loop import PollLoop
from agent.receipt import TransactionReceipt, TxEvent
from agent.submitter import ResponseSubmitter
from inference.client import CompletionClient

CONTRACT = "archway1contract"
SENDER = "bot-wallet"


class FakeBackend:
    """
    Answers the three contract queries from plain data and records executes.
    `ids` is a list of per-cycle results; the last one repeats. An Exception
    instance in place of a value is raised instead of returned.
    """

    def __init__(
        self,
        prompt: Any = "Summarize",
        ids: Optional[List[Any]] = None,
        descriptions: Optional[Dict[Any, Any]] = None,
    ) -> None:
        self.prompt = prompt
        self.ids = ids if ids is not None else [[]]
        self.descriptions = descriptions or {}
        self.queries: List[Dict[str, Any]] = []
        self.executed: List[tuple] = []
        self.execute_error: Optional[Exception] = None
        self._cycle = 0

    def query_smart(self, contract_address: str, msg: Dict[str, Any]) -> Any:
        assert contract_address == CONTRACT
        self.queries.append(msg)
        ((kind, args),) = msg.items()
        if kind == "prompt":
            return {"prompt": _value(self.prompt)}
        if kind == "request_ids":
            result = self.ids[min(self._cycle, len(self.ids) - 1)]
            self._cycle += 1
            return {"ids": _value(result)}
        if kind == "nft_info":
            token_id = args["token_id"]
            if token_id not in self.descriptions:
                raise RuntimeError(f"token {token_id} not found")
            return {"extension": {"description": _value(self.descriptions[token_id])}}
        raise RuntimeError(f"unknown query {kind}")

    def execute(self, sender: Any, contract_address: str, msg: Dict[str, Any]) -> TransactionReceipt:
        self.executed.append((sender, contract_address, msg))
        if self.execute_error is not None:
            raise self.execute_error
        token_id = msg["response"]["token_id"]
        return TransactionReceipt(
            tx_hash=f"HASH{token_id}",
            events=(TxEvent("wasm", (("action", "response"), ("token_id", str(token_id)))),),
        )

    @property
    def item_queries(self) -> List[Any]:
        return [m["nft_info"]["token_id"] for m in self.queries if "nft_info" in m]

    @property
    def submitted_tokens(self) -> List[Any]:
        return [msg["response"]["token_id"] for _, _, msg in self.executed]


def _value(v: Any) -> Any:
    if isinstance(v, Exception):
        raise v
    return v


class FakeChatCompletions:
    def __init__(self, answer: Callable[[str], Any]) -> None:
        self.answer = answer
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        content = _value(self.answer(kwargs["messages"][0]["content"]))
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    def __init__(self, answer: Callable[[str], Any] = lambda q: "A short answer.") -> None:
        self.completions = FakeChatCompletions(answer)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def openai_client() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def make_loop(backend: FakeBackend, openai_client: FakeOpenAI):
    sleeps: List[float] = []

    def _make(**kwargs: Any) -> PollLoop:
        kwargs.setdefault("sleep", sleeps.append)
        kwargs.setdefault("poll_interval_s", 5.0)
        loop = PollLoop(
            ContractClient(backend, CONTRACT, timeout_s=2.0),
            CompletionClient(openai_client, timeout_s=2.0),
            ResponseSubmitter(backend, CONTRACT, SENDER, timeout_s=2.0),
            **kwargs,
        )
        loop.sleeps = sleeps
        return loop

    return _make
