from __future__ import annotations
from enum import Enum, auto

class Phase(Enum):
    INIT = auto()
    AWAIT_SELECTOR = auto()
    RESPOND = auto()
    KEY_EXCHANGE = auto()
    AWAIT_ACK = auto()
    TRANSFER = auto()
    DONE = auto()
    ABORTED = auto()
    FAILED = auto()
