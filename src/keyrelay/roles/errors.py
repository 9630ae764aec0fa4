from __future__ import annotations

class ProtocolError(Exception):
    pass

class SessionAborted(ProtocolError):
    def __init__(self, code: str, reason: str):
        super().__init__(f"{code}: {reason}")
        self.code = code
        self.reason = reason
