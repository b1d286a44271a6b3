"""Shared fixtures for the frame-wallet test suite.

FakeFrame stands in for a running Frame wallet: it answers the raw
``wallet_switchEthereumChain`` POST through an ``httpx.MockTransport`` and
backs a fake ``AsyncWeb3.eth`` namespace, so both halves of a session see
the same wallet state.
"""

import json
import logging
from types import SimpleNamespace

import httpx
import pytest
from web3.exceptions import TimeExhausted, Web3RPCError

from frame_wallet.session import FrameSession

# Digit-only addresses are already in checksum form.
FUNDED = "0x1111111111111111111111111111111111111111"
EMPTY = "0x2222222222222222222222222222222222222222"
RECIPIENT = "0x3333333333333333333333333333333333333333"

ONE_ETHER = 10**18


class FakeFrame:
    """In-memory wallet state shared by the switch endpoint and the fake provider."""

    def __init__(self, chain_id=1, accounts=None, balances=None):
        self.chain_id = chain_id
        self.accounts = list(accounts or [])
        self.balances = dict(balances or {})
        self.offline = False
        self.drop_transactions = False
        self.switch_status = 200
        self.switch_text = ""
        self.switch_reply = None
        self.switch_requests = []
        self.sent = []
        self.receipt_waits = []
        self.receipts = {}
        self.provider_urls = []

    # -- raw HTTP side ---------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)
        body = json.loads(request.content)
        self.switch_requests.append((str(request.url), body))

        if self.switch_status != 200:
            return httpx.Response(self.switch_status, text=self.switch_text)
        if self.switch_reply is not None:
            return httpx.Response(200, content=self.switch_reply)

        self.chain_id = int(body["params"][0]["chainId"], 16)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": None})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # -- provider side ---------------------------------------------------

    def web3(self):
        return SimpleNamespace(eth=FakeEth(self))

    def web3_class(self):
        """Drop-in for ``AsyncWeb3`` that records the endpoint it is bound to."""
        frame = self

        class FakeAsyncWeb3:
            @staticmethod
            def AsyncHTTPProvider(url):
                frame.provider_urls.append(url)
                return url

            def __init__(self, provider):
                self.provider = provider
                self.eth = FakeEth(frame)

        return FakeAsyncWeb3


class FakeEth:
    """Subset of ``AsyncWeb3.eth`` used by FrameSession."""

    def __init__(self, frame: FakeFrame):
        self.frame = frame

    async def _read(self, value):
        if self.frame.offline:
            raise ConnectionError("Cannot connect to host 127.0.0.1:1248")
        return value

    @property
    def chain_id(self):
        return self._read(self.frame.chain_id)

    @property
    def accounts(self):
        return self._read(tuple(self.frame.accounts))

    async def send_transaction(self, tx):
        await self._read(None)
        self.frame.sent.append(tx)
        sender, value = tx["from"], tx["value"]
        if self.frame.balances.get(sender, 0) < value:
            raise Web3RPCError("insufficient funds for gas * price + value")

        tx_hash = len(self.frame.sent).to_bytes(32, "big")
        if not self.frame.drop_transactions:
            self.frame.balances[sender] -= value
            self.frame.balances[tx["to"]] = self.frame.balances.get(tx["to"], 0) + value
            self.frame.receipts[tx_hash] = {"transactionHash": tx_hash, "status": 1}
        return tx_hash

    async def wait_for_transaction_receipt(self, tx_hash, timeout=120, poll_latency=0.1):
        self.frame.receipt_waits.append((timeout, poll_latency))
        if tx_hash not in self.frame.receipts:
            raise TimeExhausted(
                f"Transaction {tx_hash!r} is not in the chain after {timeout} seconds"
            )
        return self.frame.receipts[tx_hash]


# ------------------------------------------------------------------------------
# Global configuration
# ------------------------------------------------------------------------------

@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def setup_test_logging(caplog):
    caplog.set_level(logging.DEBUG)


# ------------------------------------------------------------------------------
# Wallet fixtures
# ------------------------------------------------------------------------------

@pytest.fixture
def frame():
    return FakeFrame(
        accounts=[FUNDED, EMPTY],
        balances={FUNDED: 5 * ONE_ETHER},
    )


@pytest.fixture
def open_session(frame):
    """Factory that opens a FrameSession against the fake wallet."""

    async def _open(chain_id, **kwargs):
        return await FrameSession.open(
            chain_id,
            w3=frame.web3(),
            transport=frame.transport(),
            **kwargs,
        )

    return _open
