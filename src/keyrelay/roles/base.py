from __future__ import annotations
from typing import Iterable

from keyrelay.protocol.constants import ROLE, AbortCode
from keyrelay.protocol.codec import decode_int
from keyrelay.protocol.framing import FramedChannel
from keyrelay.protocol.phases import Phase
from keyrelay.util.logs import get_logger

from .errors import SessionAborted
from .state import RoleState


class Role:
    """One party of the exchange, run to completion on its own thread.

    Subclasses implement ``_run``. Aborts raised through ``abort`` end the role
    cleanly; any other exception marks it failed and propagates. Outbound
    channels are half-closed on every exit path.
    """

    name: ROLE

    def __init__(self, logger=None):
        self.state = RoleState(role=self.name)
        self.logger = logger or get_logger(role=self.name)

    def channels(self) -> Iterable[FramedChannel]:
        raise NotImplementedError

    def _run(self) -> None:
        raise NotImplementedError

    def run(self) -> RoleState:
        try:
            self._run()
            self.state.phase = Phase.DONE
            self.logger.info("role_done")
        except SessionAborted as e:
            self.state.abort(e.code, e.reason)
            self.logger.warning("session_aborted", code=e.code, reason=e.reason)
        except Exception as e:
            self.state.phase = Phase.FAILED
            self.state.error = e
            self.logger.error("role_failed", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            self.close()
        return self.state

    def close(self):
        for ch in self.channels():
            ch.close()
        self.state.cleanup()

    def abort(self, reason: str, code: str):
        raise SessionAborted(code, reason)

    def receive_required(self, channel: FramedChannel, what: str) -> bytes:
        data = channel.receive()
        if not data:
            self.abort(f"stream closed while waiting for {what}", AbortCode.PREMATURE_CLOSE)
        return data

    def receive_int(self, channel: FramedChannel, what: str) -> int:
        return decode_int(self.receive_required(channel, what))
