from __future__ import annotations

from keyrelay.config import KeyManagerConfig
from keyrelay.crypto.keywrap import wrap_key
from keyrelay.protocol.codec import decode_int
from keyrelay.protocol.constants import KEY1_SELECTOR, AbortCode
from keyrelay.protocol.framing import FramedChannel
from keyrelay.protocol.phases import Phase

from .base import Role


class KeyManager(Role):
    """Answers a single selector request with a wrapped candidate key."""

    name = "km"

    def __init__(self, channel: FramedChannel, config: KeyManagerConfig, logger=None):
        super().__init__(logger)
        self.channel = channel
        self.config = config

    def channels(self):
        return [self.channel]

    def choose_key(self, selector: int) -> bytes:
        return self.config.key1 if selector == KEY1_SELECTOR else self.config.key2

    def _run(self):
        self.state.phase = Phase.AWAIT_SELECTOR
        self.logger.info("awaiting_selector")
        raw = self.channel.receive()
        if not raw:
            # no retry: reply with an empty frame and stop
            self.channel.send(b"")
            self.abort("selector frame empty or stream closed", AbortCode.MALFORMED_MESSAGE)

        selector = decode_int(raw)
        self.state.selector = selector
        self.logger.info("selector_received", selector=selector)

        self.state.phase = Phase.RESPOND
        wrapped = wrap_key(self.choose_key(selector), self.config.wrapping_key)
        self.channel.send(wrapped)
        self.logger.info("wrapped_key_sent", size=len(wrapped))
