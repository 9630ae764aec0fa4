from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
from keyrelay.protocol.constants import ROLE
from keyrelay.protocol.phases import Phase

@dataclass
class RoleState:
    role: ROLE
    phase: Phase = Phase.INIT
    selector: Optional[int] = None
    wrapped_key: Optional[bytes] = field(default=None, repr=False)
    session_key: Optional[bytes] = field(default=None, repr=False)
    block_count: Optional[int] = None
    payload_digest: Optional[str] = None
    abort_code: Optional[str] = None
    abort_reason: Optional[str] = None
    error: Optional[BaseException] = None

    def abort(self, code: str, reason: str):
        self.abort_code = code
        self.abort_reason = reason
        self.phase = Phase.ABORTED

    def cleanup(self):
        for field_name in ['wrapped_key', 'session_key']:
            if isinstance(getattr(self, field_name), bytes):
                setattr(self, field_name, None)
