from __future__ import annotations
from importlib import import_module
from importlib.metadata import PackageNotFoundError, version

# import name -> (distribution, pip requirement, lowest supported major version)
REQUIRED = {
    "cryptography": ("cryptography", "cryptography>=41", 41),
    "structlog": ("structlog", "structlog>=23.1", 23),
    "pydantic": ("pydantic", "pydantic>=2.0", 2),
}


def _major(ver: str) -> int:
    head = ver.split(".", 1)[0]
    return int(head) if head.isdigit() else 0


def check_dependencies(required: dict | None = None) -> tuple[bool, list[str]]:
    """Report requirements that are absent or too old to run a session."""
    missing = []
    for mod, (dist, requirement, min_major) in (required or REQUIRED).items():
        try:
            import_module(mod)
            installed = version(dist)
        except (ImportError, PackageNotFoundError):
            missing.append(requirement)
            continue
        if _major(installed) < min_major:
            missing.append(requirement)
    return (len(missing) == 0, missing)
