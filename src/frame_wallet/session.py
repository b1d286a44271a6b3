"""Session against a Frame wallet's local JSON-RPC endpoint.

The wallet's active network is shared with every other process talking to
the same Frame instance and can change under us (the user can flip it in the
Frame UI), so nothing here caches the chain id: every read goes to the wallet.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3RPCError

from frame_wallet.config import DEFAULT_HOST, FRAME_PORT, FrameConfig
from frame_wallet.errors import (
    NetworkSwitchError,
    TransactionFailedError,
    TransportError,
)

logger = logging.getLogger("frame_wallet.session")

UINT256_MAX = 2**256 - 1


def _check_uint256(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int, got {type(value).__name__}")
    if not 0 <= value <= UINT256_MAX:
        raise ValueError(f"{what} must fit in an unsigned 256-bit integer, got {value}")


def encode_chain_id(chain_id: int) -> str:
    """Encode *chain_id* the way ``wallet_switchEthereumChain`` expects it.

    Lowercase, ``0x``-prefixed, no leading zeros: ``1 -> "0x1"``,
    ``42161 -> "0xa4b1"``, ``0 -> "0x0"``.
    """
    _check_uint256(chain_id, "chain_id")
    return hex(chain_id)


def build_rpc_url(host: str | None = None) -> str:
    """Return the wallet endpoint URL for *host* on Frame's fixed port.

    Raises :class:`TransportError` if *host* cannot form a valid URL.
    """
    host = (host if host is not None else DEFAULT_HOST).strip()
    if not host or "/" in host or any(ch.isspace() for ch in host):
        raise TransportError(f"Invalid wallet host '{host}'")
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"  # bare IPv6 literal

    url = f"http://{host}:{FRAME_PORT}"
    try:
        httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise TransportError(f"Invalid wallet URL {url}: {exc}") from exc
    return url


class FrameSession:
    """A client bound to one Frame wallet endpoint.

    Use :meth:`open` rather than the constructor: it also moves the wallet
    onto the requested network before handing the session back.
    """

    def __init__(
        self,
        rpc_url: str,
        w3: AsyncWeb3,
        config: FrameConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._w3 = w3
        self.config = config or FrameConfig()
        # Only used by tests and embedders that route the switch request themselves.
        self._transport = transport

    @classmethod
    async def open(
        cls,
        chain_id: int,
        host: str | None = None,
        *,
        config: FrameConfig | None = None,
        w3: AsyncWeb3 | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FrameSession:
        """Connect to Frame and switch it to *chain_id*.

        Parameters
        ----------
        chain_id:
            Target network. Not checked against any list of real networks;
            the wallet decides what it accepts.
        host:
            Host running Frame. Defaults to ``config.host`` (loopback unless
            configured otherwise). The port is always 1248.
        config:
            Timeouts and switch strictness. Defaults to :class:`FrameConfig`.
        w3:
            A pre-built provider to use instead of one bound to the endpoint.

        Raises
        ------
        TransportError
            If the endpoint URL is invalid or the wallet cannot be reached.
        NetworkSwitchError
            If the wallet rejects the switch request.
        """
        session = cls.attach(host, config=config, w3=w3, transport=transport)
        await session.switch_network(chain_id)
        return session

    @classmethod
    def attach(
        cls,
        host: str | None = None,
        *,
        config: FrameConfig | None = None,
        w3: AsyncWeb3 | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FrameSession:
        """Bind to Frame without touching its active network.

        For reads that do not depend on the network (the active chain id, the
        account list). Raises :class:`TransportError` for an invalid host.
        """
        config = config or FrameConfig()
        rpc_url = build_rpc_url(host if host is not None else config.host)
        if w3 is None:
            try:
                w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
            except Exception as exc:
                raise TransportError(f"Cannot bind provider to {rpc_url}: {exc}") from exc
        return cls(rpc_url, w3, config, transport=transport)

    @property
    def rpc_url(self) -> str:
        """The wallet endpoint this session is bound to."""
        return self._rpc_url

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    async def current_chain_id(self) -> int:
        """Ask the wallet which network it is on right now."""
        try:
            chain_id = await self._w3.eth.chain_id
        except Exception as exc:
            raise TransportError(f"Failed to fetch chain id from {self._rpc_url}: {exc}") from exc
        return int(chain_id)

    async def switch_network(self, chain_id: int) -> None:
        """Request that the wallet move to *chain_id*.

        Success means the wallet answered with a 2xx status. The call does not
        confirm that the wallet actually changed networks; compare with
        :meth:`current_chain_id` for that. Nothing is retried.
        """
        chain_id_hex = encode_chain_id(chain_id)
        payload = {
            "jsonrpc": "2.0",
            "method": "wallet_switchEthereumChain",
            "params": [{"chainId": chain_id_hex}],
            "id": "1",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.config.request_timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(self._rpc_url, json=payload)
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to reach wallet at {self._rpc_url}: {exc}") from exc

        if not resp.is_success:
            logger.warning(
                f"Network switch to {chain_id_hex} refused ({resp.status_code}): {resp.text}"
            )
            raise NetworkSwitchError(
                f"Failed to switch network: {resp.text}",
                detail=resp.text,
                status_code=resp.status_code,
            )

        if self.config.check_rpc_error:
            self._raise_for_rpc_error(resp, chain_id_hex)

        logger.info(f"Requested network switch to {chain_id_hex} ({chain_id})")

    def _raise_for_rpc_error(self, resp: httpx.Response, chain_id_hex: str) -> None:
        try:
            body: Any = resp.json()
        except ValueError as exc:
            raise TransportError(f"Malformed switch response: {resp.text!r}") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if not error:
            return
        message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        logger.warning(f"Network switch to {chain_id_hex} returned RPC error: {message}")
        raise NetworkSwitchError(
            f"Failed to switch network: {message}",
            detail=message,
            status_code=resp.status_code,
        )

    # ------------------------------------------------------------------
    # Accounts and transfers
    # ------------------------------------------------------------------

    async def accounts(self) -> list[str]:
        """Addresses the wallet exposes, in the order it reports them.

        An empty list means no account is unlocked; that is not an error.
        """
        try:
            accounts = await self._w3.eth.accounts
        except Exception as exc:
            raise TransportError(f"Failed to fetch accounts from {self._rpc_url}: {exc}") from exc
        return list(accounts)

    async def send(self, from_address: str, to_address: str, amount: int) -> str:
        """Send *amount* wei from *from_address* to *to_address* through the wallet.

        Gas, fees and nonce are left to the wallet. The wallet prompts the
        user, signs and broadcasts; this coroutine then waits for the receipt
        and returns the transaction hash as a ``0x`` hex string.

        Raises :class:`TransactionFailedError` if the wallet refuses the
        transaction or no receipt shows up within ``config.receipt_timeout``.
        """
        _check_uint256(amount, "amount")
        tx = {
            "from": Web3.to_checksum_address(from_address),
            "to": Web3.to_checksum_address(to_address),
            "value": amount,
        }

        try:
            pending = await self._w3.eth.send_transaction(tx)
        except Web3RPCError as exc:
            logger.warning(f"Wallet refused transfer from {tx['from']}: {exc}")
            raise TransactionFailedError(detail=str(exc)) from exc
        except Exception as exc:
            raise TransportError(f"Failed to submit transaction: {exc}") from exc

        pending_hex = Web3.to_hex(pending)
        logger.info(
            f"Transaction submitted: {amount} wei {tx['from']} -> {tx['to']} (tx={pending_hex})"
        )

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                pending,
                timeout=self.config.receipt_timeout,
                poll_latency=self.config.receipt_poll_latency,
            )
        except TimeExhausted as exc:
            logger.warning(f"No receipt for {pending_hex}: {exc}")
            raise TransactionFailedError(detail=str(exc)) from exc
        except Exception as exc:
            raise TransportError(f"Failed to fetch receipt for {pending_hex}: {exc}") from exc

        if not receipt:
            logger.warning(f"Empty receipt for {pending_hex}")
            raise TransactionFailedError(detail=f"No receipt for {pending_hex}")

        tx_hash = Web3.to_hex(receipt["transactionHash"])
        logger.info(f"Transaction confirmed: {tx_hash}")
        return tx_hash
