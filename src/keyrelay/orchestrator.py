"""Runs the key manager, sender and receiver concurrently over framed channels."""
from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from keyrelay.config import KeyMaterial
from keyrelay.crypto.modes import Mode
from keyrelay.crypto.primitives import digest_for_logging
from keyrelay.protocol.constants import ACK_TOKEN
from keyrelay.protocol.framing import duplex_channel
from keyrelay.protocol.phases import Phase
from keyrelay.roles.base import Role
from keyrelay.roles.key_manager import KeyManager
from keyrelay.roles.receiver import Receiver
from keyrelay.roles.sender import Sender
from keyrelay.util.logs import get_logger


class RoleThread(threading.Thread):
    def __init__(self, role: Role):
        super().__init__(name=f"keyrelay-{role.name}", daemon=True)
        self.role = role
        self.error: Optional[Exception] = None

    def run(self):
        try:
            self.role.run()
        except Exception as e:
            # already logged by the role; kept for the report
            self.error = e


@dataclass
class SessionReport:
    selector: Optional[int]
    mode: Optional[Mode]
    phases: Dict[str, Phase]
    block_count: Optional[int]
    blocks_sent: int
    sent_digest: Optional[str]
    recovered_digest: Optional[str]
    recovered: Optional[bytes] = field(default=None, repr=False)
    errors: Dict[str, Exception] = field(default_factory=dict)
    abort_codes: Dict[str, str] = field(default_factory=dict)

    @property
    def verified(self) -> bool:
        return self.sent_digest is not None and self.sent_digest == self.recovered_digest

    @property
    def aborted(self) -> bool:
        return any(p is Phase.ABORTED for p in self.phases.values())

    def raise_for_errors(self):
        for exc in self.errors.values():
            raise exc


def run_session(material: KeyMaterial,
                select_mode: Callable[[], int],
                load_payload: Callable[[], bytes],
                digest: Callable[[bytes], str] = digest_for_logging,
                capacity: Optional[int] = None,
                ack_token: bytes = ACK_TOKEN) -> SessionReport:
    logger = get_logger(role="orchestrator")
    a_to_b, b_to_a = duplex_channel(capacity)
    a_to_km, km_to_a = duplex_channel(capacity)

    peer_cfg = material.peer_config()
    km = KeyManager(km_to_a, material.km_config())
    sender = Sender(a_to_b, a_to_km, peer_cfg, select_mode, load_payload, digest=digest)
    receiver = Receiver(b_to_a, peer_cfg, digest=digest, ack_token=ack_token)

    threads = [RoleThread(r) for r in (sender, receiver, km)]
    logger.info("session_started", roles=[t.role.name for t in threads])
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    report = SessionReport(
        selector=sender.state.selector,
        mode=sender.mode,
        phases={t.role.name: t.role.state.phase for t in threads},
        block_count=sender.state.block_count,
        blocks_sent=sender.blocks_sent,
        sent_digest=sender.state.payload_digest,
        recovered_digest=receiver.state.payload_digest,
        recovered=receiver.recovered,
        errors={t.role.name: t.error for t in threads if t.error is not None},
        abort_codes={t.role.name: t.role.state.abort_code for t in threads if t.role.state.abort_code},
    )
    logger.info("session_finished",
                verified=report.verified,
                phases={k: v.name for k, v in report.phases.items()},
                blocks=report.blocks_sent)
    return report
