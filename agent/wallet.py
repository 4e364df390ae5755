"""
Bot wallet: derives the signing account for the response transactions from MNEMONIC.

SECURITY RULES (enforced here):
  - The mnemonic is NEVER logged, returned from /info, or written to disk.
  - Only the derived bech32 address is exposed externally.
  - All signing happens in-memory via cosmpy's LocalWallet.

Usage:
    from agent.wallet import build_wallet, wallet_info

    wallet = build_wallet(config)     # cosmpy LocalWallet
    info   = wallet_info(wallet)      # {"address": "archway1...", ...}
"""

from __future__ import annotations

from cosmpy.aerial.wallet import LocalWallet

from agent.config import BotConfig

# Secp256k1HdWallet default (cosmos coin type 118)
DERIVATION_PATH = "m/44'/118'/0'/0/0"


def build_wallet(config: BotConfig) -> LocalWallet:
    """
    Derive the bot's LocalWallet from the configured mnemonic and address prefix.
    Raises RuntimeError with a mnemonic-free message if derivation fails.
    """
    mnemonic = config.mnemonic.strip()
    if not mnemonic:
        raise RuntimeError("MNEMONIC not set. Put the bot seed phrase in .env for local runs.")
    try:
        return LocalWallet.from_mnemonic(mnemonic, prefix=config.address_prefix)
    except Exception as exc:
        # the exception text may echo words from the phrase
        raise RuntimeError(f"could not derive wallet from MNEMONIC ({type(exc).__name__})") from None


def wallet_address(wallet) -> str:
    return str(wallet.address())


def wallet_info(wallet) -> dict:
    """
    Return safe public wallet info for the /info endpoint.
    NEVER includes the mnemonic or private key.
    """
    if wallet is None:
        return {"address": None}
    return {
        "address":    wallet_address(wallet),
        "derivation": DERIVATION_PATH,
    }
