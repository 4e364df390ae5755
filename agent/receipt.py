"""
Typed view of a broadcast transaction result.

The chain backend converts whatever its SDK returns into a TransactionReceipt,
so the poll loop and tests never touch SDK response objects directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple

WASM_EVENT = "wasm"
TOKEN_ID_KEY = "token_id"


@dataclass(frozen=True)
class TxEvent:
    type: str
    attributes: Tuple[Tuple[str, str], ...] = ()

    def get(self, key: str) -> Optional[str]:
        for attr_key, value in self.attributes:
            if attr_key == key:
                return value
        return None


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    code: int = 0
    events: Tuple[TxEvent, ...] = ()
    height: Optional[int] = None
    gas_used: Optional[int] = None
    raw_log: str = ""

    @property
    def ok(self) -> bool:
        return self.code == 0


def events_from_mapping(events: Mapping[str, Mapping[str, str]]) -> Tuple[TxEvent, ...]:
    """Convert {event_type: {key: value}} (the cosmpy shape) into TxEvents."""
    return tuple(
        TxEvent(type=str(event_type), attributes=tuple((str(k), str(v)) for k, v in attrs.items()))
        for event_type, attrs in events.items()
    )


def extract_token_id(
    receipt: TransactionReceipt,
    event_type: str = WASM_EVENT,
    key: str = TOKEN_ID_KEY,
) -> Optional[str]:
    """
    Return the value of `key` on the first `event_type` event that carries it.
    None means the receipt has no such attribute (nothing emitted, or a contract
    that does not echo the token id).
    """
    return _first_attribute(receipt.events, event_type, key)


def _first_attribute(events: Iterable[TxEvent], event_type: str, key: str) -> Optional[str]:
    for event in events:
        if event.type != event_type:
            continue
        value = event.get(key)
        if value is not None:
            return value
    return None
