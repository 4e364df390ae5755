"""
Read-only queries against the NFT request contract.

  fetch_prompt()        {"prompt": {}}                     -> {"prompt": "..."}
  fetch_pending_ids()   {"request_ids": {}}                -> {"ids": [...]}
  fetch_item(token_id)  {"nft_info": {"token_id": ...}}    -> {"extension": {"description": "..."}, ...}

Each query runs under a deadline and is tried once. Any failure, including a
malformed response, is raised as QueryFailed with the original cause chained.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from agent.chain import ChainBackend
from agent.deadline import call_with_deadline
from agent.errors import OperationTimeout, QueryFailed

logger = logging.getLogger(__name__)

TokenId = Union[str, int]


@dataclass(frozen=True)
class NftItem:
    token_id: TokenId
    description: str


class ContractClient:
    def __init__(self, backend: ChainBackend, contract_address: str, *, timeout_s: float = 30.0) -> None:
        self._backend = backend
        self.contract_address = contract_address
        self.timeout_s = timeout_s

    def _query(self, operation: str, msg: Dict[str, Any]) -> Any:
        try:
            return call_with_deadline(
                lambda: self._backend.query_smart(self.contract_address, msg),
                self.timeout_s,
                name=operation,
            )
        except OperationTimeout as exc:
            raise QueryFailed(operation, f"timed out after {self.timeout_s:g}s") from exc
        except Exception as exc:
            raise QueryFailed(operation, f"{type(exc).__name__}: {exc}") from exc

    def fetch_prompt(self) -> str:
        data = self._query("prompt", {"prompt": {}})
        prompt = data.get("prompt") if isinstance(data, dict) else None
        if not isinstance(prompt, str):
            raise QueryFailed("prompt", f"unexpected response: {data!r}")
        return prompt

    def fetch_pending_ids(self) -> List[TokenId]:
        data = self._query("request_ids", {"request_ids": {}})
        ids = data.get("ids") if isinstance(data, dict) else None
        if not isinstance(ids, list):
            raise QueryFailed("request_ids", f"unexpected response: {data!r}")
        return list(ids)

    def fetch_item(self, token_id: TokenId) -> NftItem:
        data = self._query("nft_info", {"nft_info": {"token_id": token_id}})
        extension = data.get("extension") if isinstance(data, dict) else None
        description = extension.get("description") if isinstance(extension, dict) else None
        if not isinstance(description, str):
            raise QueryFailed("nft_info", f"token {token_id}: no description in {data!r}")
        return NftItem(token_id=token_id, description=description)
