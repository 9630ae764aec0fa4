# keyrelay - three-party key distribution and block-mode transfer demo
# Key manager -> sender -> receiver over in-process framed channels, AES-ECB/CBC payload.
# WARNING: teaching implementation. ECB, fixed IVs and unauthenticated ciphertext are not safe for real data.

from __future__ import annotations

import argparse
import secrets
import sys

from keyrelay.protocol.constants import PROTO_NAME, PROTO_VER
from keyrelay.util.deps import check_dependencies

EXIT_OK = 0
EXIT_SETUP = 1
EXIT_ABORTED = 2
EXIT_ROLE_ERROR = 3

logger = None  # structlog logger, set in main()


def security_self_check():
    from keyrelay.crypto.keywrap import wrap_key, unwrap_key
    from keyrelay.crypto.modes import ECBMode, CBCMode
    from keyrelay.crypto.primitives import encrypt_block, random_key
    from keyrelay.protocol.framing import encode_frame, decode_frame

    checks = []

    checks.append(("Python >= 3.9", sys.version_info >= (3, 9)))

    try:
        test = [secrets.randbits(16) for _ in range(10)]
        checks.append(("Random source", len(set(test)) > 1))
    except Exception:
        checks.append(("Random source", False))

    # FIPS-197 appendix C.1 vector
    try:
        ct = encrypt_block(bytes.fromhex("00112233445566778899aabbccddeeff"),
                           bytes.fromhex("000102030405060708090a0b0c0d0e0f"))
        checks.append(("AES-128 known answer", ct.hex() == "69c4e0d86a7b0430d8cdb78070b4c55a"))
    except Exception:
        checks.append(("AES-128 known answer", False))

    sample = b"self-check payload spanning more than one block"
    try:
        k, iv = random_key(), random_key()
        checks.append(("ECB round-trip", ECBMode(k).decrypt(ECBMode(k).encrypt(sample)) == sample))
        checks.append(("CBC round-trip", CBCMode(k, iv).decrypt(CBCMode(k, iv).encrypt(sample)) == sample))
    except Exception:
        checks.append(("Cipher mode round-trip", False))

    try:
        checks.append(("Framing round-trip", decode_frame(encode_frame(sample)) == sample))
    except Exception:
        checks.append(("Framing round-trip", False))

    try:
        k, kw = random_key(), random_key()
        checks.append(("Key wrap round-trip", unwrap_key(wrap_key(k, kw), kw) == k))
    except Exception:
        checks.append(("Key wrap round-trip", False))

    all_ok = all(ok for _, ok in checks)
    for name, ok in checks:
        (logger.info if ok else logger.error)("security_check", check=name, status=("OK" if ok else "FAILED"))

    if not all_ok:
        raise RuntimeError("Security self-check failed")
    logger.info("security_self_check_passed")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keyrelay", description="Three-party key exchange and block-mode transfer")
    parser.add_argument("--version", action="version", version=f"{PROTO_NAME} {PROTO_VER}")
    parser.add_argument("--log-level", default="info")
    parser.add_argument("--console-logs", action="store_true", help="Human readable logs instead of JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one key manager / sender / receiver session")
    run_parser.add_argument("--mode", type=int, help="1 for ECB, anything else for CBC (prompted if omitted)")
    run_parser.add_argument("--payload", help="File to transmit (built-in sample text if omitted)")
    run_parser.add_argument("--pipe-capacity", type=int, default=None, help="Bound each in-process pipe to N bytes")

    subparsers.add_parser("gen-key", help="Print a fresh 128-bit key as hex")
    subparsers.add_parser("check", help="Run security self-check")
    return parser


def run_command(args) -> int:
    from keyrelay.config import KeyMaterial
    from keyrelay.orchestrator import run_session
    from keyrelay.sources import FilePayloadSource, StaticPayloadSource, fixed_selector, prompt_mode_selector

    select_mode = fixed_selector(args.mode) if args.mode is not None else prompt_mode_selector()
    load_payload = FilePayloadSource(args.payload) if args.payload else StaticPayloadSource()

    report = run_session(KeyMaterial.generate(), select_mode, load_payload, capacity=args.pipe_capacity)

    if report.errors:
        for role, exc in report.errors.items():
            print(f"{role} failed: {exc}")
        return EXIT_ROLE_ERROR
    if report.aborted:
        print(f"Session aborted: {report.abort_codes}")
        return EXIT_ABORTED

    print(f"Mode: {report.mode.name}, blocks: {report.blocks_sent}")
    print(f"Sender digest:   {report.sent_digest}")
    print(f"Receiver digest: {report.recovered_digest}")
    print("✓ Payload verified" if report.verified else "✗ Digest mismatch")
    return EXIT_OK if report.verified else EXIT_ROLE_ERROR


def main(argv=None) -> int:
    ok, missing = check_dependencies()
    if not ok:
        print("ERROR: Missing dependencies:")
        for dep in missing:
            print(f"  - {dep}")
        print("\nInstall with:")
        print("pip install " + " ".join(f"'{dep}'" for dep in missing))
        return EXIT_SETUP

    args = build_parser().parse_args(argv)

    from keyrelay.util.logs import configure_logging, get_logger
    configure_logging(args.log_level, json=not args.console_logs)
    global logger
    logger = get_logger(role="cli")

    if args.command == "gen-key":
        print(secrets.token_bytes(16).hex())
        return EXIT_OK

    try:
        security_self_check()
    except RuntimeError as e:
        print(f"✗ {e}")
        return EXIT_SETUP

    if args.command == "check":
        print("✓ Security self-check passed")
        return EXIT_OK

    try:
        return run_command(args)
    except KeyboardInterrupt:
        logger.info("shutdown", reason="keyboard_interrupt")
        print("\nShutting down...")
        return EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
