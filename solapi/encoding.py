"""Base58/base64 helpers and public-key validation."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_INDEX = {ord(ch): value for value, ch in enumerate(_ALPHABET)}

PUBKEY_BYTES = 32
PRIVATE_KEY_BYTES = 64
_MAX_BASE58_PUBKEY_LEN = 44


class ValidationError(ValueError):
    """Raised when input cannot be decoded or does not have the expected shape."""


def encode_base58(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    data = bytes(data)
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def decode_base58(s: str) -> bytes:
    """Decode a base58 string, raising ValidationError on bad characters."""
    raw = s.encode("utf-8")
    number = 0
    for index, byte in enumerate(raw):
        digit = _ALPHABET_INDEX.get(byte)
        if digit is None:
            raise ValidationError(
                f"provided string contained invalid character {chr(byte)!r} at byte {index}"
            )
        number = number * 58 + digit
    leading_ones = len(raw) - len(raw.lstrip(b"1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\0" * leading_ones + body


def encode_base64(data: bytes) -> str:
    """Encode bytes as standard padded base64."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_base64(s: str) -> bytes:
    """Decode standard padded base64, raising ValidationError on malformed input."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValidationError(str(exc)) from exc


@dataclass(frozen=True)
class Pubkey:
    """A 32-byte account address, shown in base58."""

    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", bytes(self.raw))
        if len(self.raw) != PUBKEY_BYTES:
            raise ValidationError("String is the wrong size")

    @classmethod
    def from_string(cls, text: str) -> "Pubkey":
        """Parse a base58 address."""
        if len(text) > _MAX_BASE58_PUBKEY_LEN:
            raise ValidationError("String is the wrong size")
        try:
            decoded = decode_base58(text)
        except ValidationError as exc:
            raise ValidationError("Invalid Base58 string") from exc
        if len(decoded) != PUBKEY_BYTES:
            raise ValidationError("String is the wrong size")
        return cls(decoded)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return encode_base58(self.raw)


def validate_pubkey(pubkey: str) -> Pubkey:
    """Parse an address or raise ValidationError prefixed with 'Invalid pubkey'."""
    try:
        return Pubkey.from_string(pubkey)
    except ValidationError as exc:
        raise ValidationError(f"Invalid pubkey: {exc}") from exc


def validate_private_key(secret: str) -> bytes:
    """Decode a base58 64-byte keypair secret."""
    decoded = decode_base58(secret)
    if len(decoded) != PRIVATE_KEY_BYTES:
        raise ValidationError("Private key must be 64 bytes")
    return decoded