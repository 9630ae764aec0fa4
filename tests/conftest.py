import pytest
import structlog

from keyrelay.config import KeyMaterial
from keyrelay.protocol.framing import duplex_channel


@pytest.fixture(autouse=True)
def quiet_logs():
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def material():
    return KeyMaterial.generate()


@pytest.fixture
def fixed_material():
    return KeyMaterial(key1=b"\x11" * 16, key2=b"\x22" * 16, wrapping_key=b"\x00" * 16, iv=b"\x5a" * 16)


@pytest.fixture
def channel_pair():
    return duplex_channel()
