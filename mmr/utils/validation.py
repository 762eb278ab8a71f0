"""
Checks for proof material that arrives from outside the engine.

Each check returns ``(ok, reason)``. The verifier turns a failed check into
``VerifyStatus.PROOF_MALFORMED``, the engine into ``ValueError`` and the
JSON schema into a pydantic validation error.
"""

from typing import Any, Optional, Tuple

DEFAULT_HASH_SIZE = 32
MAX_U64 = 2**64 - 1
# One sibling per level and at most one peak per bit of a u64 leaf count.
MAX_PATH_LENGTH = 64

Check = Tuple[bool, str]

OK: Check = (True, "")


def validate_bytes(data: Any, name: str, expected_length: Optional[int] = None) -> Check:
    """Require ``bytes``/``bytearray``, optionally of an exact length."""
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"
    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"
    return OK


def validate_hash(
    hash_value: Any,
    name: str = "hash",
    digest_size: int = DEFAULT_HASH_SIZE,
) -> Check:
    """A single digest produced by the engine's hasher."""
    return validate_bytes(hash_value, name, expected_length=digest_size)


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_U64,
) -> Check:
    """
    Integer within ``[min_val, max_val]``.

    ``True``/``False`` are rejected: an index of ``True`` is a caller bug,
    not leaf 1.
    """
    if type(value) is bool or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"
    if not min_val <= value <= max_val:
        return False, f"{name} must be in [{min_val}, {max_val}], got {value}"
    return OK


def validate_hash_list(
    values: Any,
    name: str,
    digest_size: int = DEFAULT_HASH_SIZE,
    max_length: int = MAX_PATH_LENGTH,
) -> Check:
    """A sibling path or peak list: at most ``max_length`` digests."""
    if not isinstance(values, (list, tuple)):
        return False, f"{name} must be a list, got {type(values).__name__}"
    if len(values) > max_length:
        return False, f"{name} has {len(values)} entries, limit is {max_length}"
    for i, value in enumerate(values):
        ok, reason = validate_hash(value, f"{name}[{i}]", digest_size)
        if not ok:
            return ok, reason
    return OK


def validate_hex_string(value: Any, name: str, expected_bytes: Optional[int] = None) -> Check:
    """Hex text as used by the JSON proof form, ``0x`` prefix optional."""
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    digits = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        decoded = bytes.fromhex(digits)
    except ValueError:
        return False, f"{name} is not valid hex"
    # fromhex skips whitespace between bytes
    if len(decoded) * 2 != len(digits):
        return False, f"{name} is not valid hex"

    if expected_bytes is not None and len(decoded) != expected_bytes:
        return False, f"{name} must be {expected_bytes} bytes, got {len(decoded)}"
    return OK


__all__ = [
    "validate_bytes",
    "validate_hash",
    "validate_integer",
    "validate_hash_list",
    "validate_hex_string",
    "DEFAULT_HASH_SIZE",
    "MAX_U64",
    "MAX_PATH_LENGTH",
]
