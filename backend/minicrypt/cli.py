"""
Command line front end for both ciphers.

    minicrypt affine --method attack --input secret.jpg.enc --output secret.jpg
    minicrypt affine --method encrypt --input cat.jpg --output cat.enc -a 7 -b 11
    minicrypt rdes -x "hello" -k AE3 -m 0
    minicrypt rdes -x cat.enc -f -k AE3 -m 1 -o cat.jpg
"""
import argparse
import logging
import sys
import time
from typing import Optional

from . import affine_engine, __version__
from .rdes_engine import MiniDES

logger = logging.getLogger(__name__)

AFFINE_METHODS = ("encrypt", "decrypt", "attack")


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="minicrypt",
        description="Affine byte cipher (with JPEG signature attack) and reduced 3-round DES",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="cmd", required=True)

    p_aff = sub.add_parser("affine", help="Encrypt, decrypt or attack a file with (a*x + b) mod 256")
    p_aff.add_argument("--method", required=True, type=str.lower, choices=AFFINE_METHODS,
                       help="The method to use: [decrypt, encrypt, attack].")
    p_aff.add_argument("--input", required=True, help="The input file.")
    p_aff.add_argument("--output", required=True, help="The output file.")
    p_aff.add_argument("-a", type=int, default=None, help="The a key (only used for decrypt / encrypt).")
    p_aff.add_argument("-b", type=int, default=None, help="The b key (only used for decrypt / encrypt).")

    p_des = sub.add_parser("rdes", help="Reduced DES over a string or a file")
    p_des.add_argument("-x", dest="input", required=True, help="The input string (or path with -f).")
    p_des.add_argument("-k", dest="key", required=True, help="12-bit key as 3 hex characters (ex. AE3).")
    p_des.add_argument("-m", dest="method", type=int, choices=(0, 1), default=0,
                       help="The method to use: [0: encryption, 1: decryption].")
    p_des.add_argument("-o", dest="output", default=None,
                       help="The output file (defaults to console if not specified).")
    p_des.add_argument("-f", dest="is_file", action="store_true", help="Treat -x as a file path.")

    return ap


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def run_affine(args) -> int:
    if args.method in ("encrypt", "decrypt") and (args.a is None or args.b is None):
        print("A valid a and b key must be provided for decrypt / encrypt methods", file=sys.stderr)
        return 2

    data = _read(args.input)

    if args.method == "encrypt":
        output = affine_engine.encrypt(data, args.a, args.b)
    elif args.method == "decrypt":
        output = affine_engine.decrypt(data, args.a, args.b)
    else:
        output, key = affine_engine.attack_with_key(data)
        print(f"a is {key.a}, b is {key.b}")

    _write(args.output, output)
    logger.info(f"Wrote {len(output)} bytes to {args.output}")
    return 0


def run_rdes(args) -> int:
    if not args.input:
        print("No input given", file=sys.stderr)
        return 2

    data = _read(args.input) if args.is_file else args.input.encode("utf-8")

    tic = time.perf_counter()

    cipher = MiniDES(args.key)
    print(f"Keys: {' '.join(cipher.round_keys_hex())}")

    if args.method == 0:
        output = cipher.encrypt_bytes(data)
    else:
        output = cipher.decrypt_bytes(data)

    if args.output:
        _write(args.output, output)
    else:
        print(f"Output: {output.decode('utf-8', errors='replace')}")

    print(f"Runtime (s): {time.perf_counter() - tic:f}")
    return 0


def main(argv: Optional[list] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "affine":
            return run_affine(args)
        return run_rdes(args)
    except OSError as e:
        print(f"Unable to access file: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # InvalidKeyError / KeyRecoveryError land here
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
