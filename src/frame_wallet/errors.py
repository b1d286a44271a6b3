"""Exception types raised by the Frame wallet client."""

from __future__ import annotations


class FrameError(Exception):
    """Base class for every failure surfaced by :mod:`frame_wallet`.

    ``detail`` holds diagnostic text from the wallet (a response body or an
    RPC error message) when there is any.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class TransportError(FrameError):
    """The wallet could not be reached, or its reply could not be parsed."""


class NetworkSwitchError(FrameError):
    """The wallet answered ``wallet_switchEthereumChain`` with a failure."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, detail)
        self.status_code = status_code


class TransactionFailedError(FrameError):
    """A submitted transfer never produced a receipt."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Tx failed to send", detail)
