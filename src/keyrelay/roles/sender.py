from __future__ import annotations
from typing import Callable

from keyrelay.config import PeerConfig
from keyrelay.crypto.keywrap import unwrap_key
from keyrelay.crypto.modes import Mode, cipher_for
from keyrelay.crypto.primitives import digest_for_logging, safe_compare
from keyrelay.protocol.codec import encode_int
from keyrelay.protocol.constants import ACK_TOKEN, AbortCode
from keyrelay.protocol.framing import FramedChannel
from keyrelay.protocol.phases import Phase
from keyrelay.sources import PayloadUnavailable

from .base import Role


class Sender(Role):
    """Party A: obtains the session key from the key manager and streams the payload to B."""

    name = "sender"

    def __init__(self,
                 peer: FramedChannel,
                 km: FramedChannel,
                 config: PeerConfig,
                 select_mode: Callable[[], int],
                 load_payload: Callable[[], bytes],
                 digest: Callable[[bytes], str] = digest_for_logging,
                 logger=None):
        super().__init__(logger)
        self.peer = peer
        self.km = km
        self.config = config
        self.select_mode = select_mode
        self.load_payload = load_payload
        self.digest = digest
        self.mode: Mode | None = None
        self.blocks_sent = 0

    def channels(self):
        return [self.peer, self.km]

    def request_key(self, selector: int) -> bytes:
        self.km.send(encode_int(selector))
        self.logger.info("selector_sent_to_km", selector=selector)
        wrapped = self.receive_required(self.km, "wrapped key")
        self.logger.info("wrapped_key_received", size=len(wrapped))
        return wrapped

    def _run(self):
        selector = self.select_mode()
        self.state.selector = selector
        self.mode = Mode.from_selector(selector)
        self.peer.send(encode_int(selector))
        self.logger.info("selector_sent", selector=selector, mode=self.mode.name)

        self.state.phase = Phase.KEY_EXCHANGE
        wrapped = self.request_key(selector)
        self.state.wrapped_key = wrapped
        self.peer.send(wrapped)
        self.logger.info("wrapped_key_relayed")
        self.state.session_key = unwrap_key(wrapped, self.config.wrapping_key)
        self.logger.info("session_key_unwrapped")

        self.state.phase = Phase.AWAIT_ACK
        ack = self.peer.receive()
        if not safe_compare(ack, ACK_TOKEN):
            self.abort(f"expected acknowledgement {ACK_TOKEN!r}, got {ack!r}", AbortCode.UNEXPECTED_ACK)
        self.logger.info("ack_received")

        try:
            payload = self.load_payload()
        except PayloadUnavailable as e:
            self.logger.error("payload_unavailable", error=str(e))
            self.abort(str(e), AbortCode.PAYLOAD_UNAVAILABLE)
        self.state.payload_digest = self.digest(payload)
        self.logger.info("payload_digest", sha256=self.state.payload_digest, size=len(payload))

        self.state.phase = Phase.TRANSFER
        cipher = cipher_for(self.mode, self.state.session_key, self.config.iv)
        blocks = cipher.encrypt(payload)
        self.state.block_count = len(blocks)
        self.logger.info("sending_blocks", count=len(blocks))
        self.peer.send(encode_int(len(blocks)))
        for block in blocks:
            self.peer.send(block)
            self.blocks_sent += 1
        self.logger.info("blocks_sent", count=self.blocks_sent)
