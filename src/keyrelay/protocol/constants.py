from __future__ import annotations
from typing import Literal

ROLE = Literal["km", "sender", "receiver"]
PROTO_NAME = "keyrelay"
PROTO_VER = "1.0"

BLOCK_SIZE = 16
KEY_SIZE = 16
IV_SIZE = 16
LENGTH_PREFIX_SIZE = 4
MAX_FRAME_LENGTH = 2 ** 32 - 1

ACK_TOKEN = b"OK"

MODE_ECB = 1
MODE_CBC = 2
KEY1_SELECTOR = 1

MODE_PROMPT = "Enter 1 for ECB or 2 for CBC"

class AbortCode:
    PREMATURE_CLOSE = "premature_close"
    UNEXPECTED_ACK = "unexpected_ack"
    PAYLOAD_UNAVAILABLE = "payload_unavailable"
    MALFORMED_MESSAGE = "malformed_message"
