from __future__ import annotations
from typing import Callable, List, Optional

from keyrelay.config import PeerConfig
from keyrelay.crypto.keywrap import unwrap_key
from keyrelay.crypto.modes import Mode, cipher_for
from keyrelay.crypto.primitives import digest_for_logging
from keyrelay.protocol.constants import ACK_TOKEN, AbortCode
from keyrelay.protocol.framing import FramedChannel
from keyrelay.protocol.phases import Phase

from .base import Role


class Receiver(Role):
    """Party B: unwraps the relayed key, acknowledges, and decrypts the block stream."""

    name = "receiver"

    def __init__(self,
                 peer: FramedChannel,
                 config: PeerConfig,
                 digest: Callable[[bytes], str] = digest_for_logging,
                 ack_token: bytes = ACK_TOKEN,
                 logger=None):
        super().__init__(logger)
        self.peer = peer
        self.config = config
        self.digest = digest
        self.ack_token = ack_token
        self.mode: Optional[Mode] = None
        self.recovered: Optional[bytes] = None

    def channels(self):
        return [self.peer]

    def _run(self):
        self.state.phase = Phase.AWAIT_SELECTOR
        self.logger.info("awaiting_selector")
        selector = self.receive_int(self.peer, "mode selector")
        self.state.selector = selector
        self.mode = Mode.from_selector(selector)
        self.logger.info("selector_received", selector=selector, mode=self.mode.name)

        self.state.phase = Phase.KEY_EXCHANGE
        wrapped = self.receive_required(self.peer, "wrapped key")
        self.state.wrapped_key = wrapped
        self.logger.info("wrapped_key_received", size=len(wrapped))
        self.state.session_key = unwrap_key(wrapped, self.config.wrapping_key)
        self.logger.info("session_key_unwrapped")
        self.peer.send(self.ack_token)
        self.logger.info("ack_sent")

        self.state.phase = Phase.TRANSFER
        count = self.receive_int(self.peer, "block count")
        if count < 0:
            self.abort(f"negative block count {count}", AbortCode.MALFORMED_MESSAGE)
        self.state.block_count = count
        self.logger.info("expecting_blocks", count=count)
        blocks: List[bytes] = []
        for i in range(count):
            blocks.append(self.receive_required(self.peer, f"block {i + 1}/{count}"))
        self.logger.info("blocks_received", count=len(blocks))

        cipher = cipher_for(self.mode, self.state.session_key, self.config.iv)
        self.recovered = cipher.decrypt(blocks)
        self.state.payload_digest = self.digest(self.recovered)
        self.logger.info("payload_digest", sha256=self.state.payload_digest, size=len(self.recovered))
