"""Well-known EVM networks, for display and name lookup only.

The session forwards any chain id to the wallet verbatim; this table only
lets the CLI accept ``arbitrum`` instead of ``42161`` and print explorer links.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chain:
    """An EVM-compatible blockchain network."""

    name: str
    chain_id: int
    native_symbol: str
    explorer_url: str


CHAINS: dict[str, Chain] = {
    "ethereum": Chain(
        name="ethereum",
        chain_id=1,
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
    ),
    "optimism": Chain(
        name="optimism",
        chain_id=10,
        native_symbol="ETH",
        explorer_url="https://optimistic.etherscan.io",
    ),
    "polygon": Chain(
        name="polygon",
        chain_id=137,
        native_symbol="POL",
        explorer_url="https://polygonscan.com",
    ),
    "base": Chain(
        name="base",
        chain_id=8453,
        native_symbol="ETH",
        explorer_url="https://basescan.org",
    ),
    "arbitrum": Chain(
        name="arbitrum",
        chain_id=42161,
        native_symbol="ETH",
        explorer_url="https://arbiscan.io",
    ),
    "sepolia": Chain(
        name="sepolia",
        chain_id=11155111,
        native_symbol="ETH",
        explorer_url="https://sepolia.etherscan.io",
    ),
}


def get_chain(name: str) -> Chain:
    """Get a chain by name. Raises ``KeyError`` if not found."""
    if name not in CHAINS:
        raise KeyError(
            f"Unknown chain '{name}'. Available: {list_chain_names()}"
        )
    return CHAINS[name]


def find_chain(chain_id: int) -> Chain | None:
    """Return the registry entry for *chain_id*, or ``None`` if it is not listed."""
    for chain in CHAINS.values():
        if chain.chain_id == chain_id:
            return chain
    return None


def list_chain_names() -> list[str]:
    """Return the names of all known chains."""
    return list(CHAINS.keys())


def resolve_chain_id(value: str) -> int:
    """Turn a user-supplied chain reference into a numeric chain id.

    Accepts a registry name (``"arbitrum"``), a decimal id (``"42161"``) or a
    ``0x``-prefixed hex id (``"0xa4b1"``). Ids that are not in the registry
    are returned unchanged; whether the wallet knows them is its business.

    Raises ``ValueError`` for anything else.
    """
    text = value.strip().lower()
    if text in CHAINS:
        return get_chain(text).chain_id
    try:
        chain_id = int(text, 16) if text.startswith("0x") else int(text)
    except ValueError:
        raise ValueError(
            f"Invalid chain '{value}'. Use a chain id or one of {list_chain_names()}"
        ) from None
    if chain_id < 0:
        raise ValueError(f"Chain id must be non-negative, got {chain_id}")
    return chain_id
