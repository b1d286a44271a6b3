"""Client for the Frame desktop wallet's local JSON-RPC endpoint.

Opens a session that moves the wallet onto a chosen network, reads the
active network and unlocked accounts, and sends native-currency transfers
for the user to approve in Frame.
"""

from frame_wallet.config import FRAME_PORT, FrameConfig
from frame_wallet.errors import (
    FrameError,
    NetworkSwitchError,
    TransactionFailedError,
    TransportError,
)
from frame_wallet.session import FrameSession, encode_chain_id

__all__ = [
    "FRAME_PORT",
    "FrameConfig",
    "FrameError",
    "FrameSession",
    "NetworkSwitchError",
    "TransactionFailedError",
    "TransportError",
    "encode_chain_id",
]
