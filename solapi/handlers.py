"""Request handlers for keypairs, message signing, token and transfer instructions."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping

import nacl.exceptions
import nacl.signing

from solapi.encoding import (
    ValidationError,
    decode_base58,
    decode_base64,
    encode_base58,
    encode_base64,
    validate_private_key,
    validate_pubkey,
)
from solapi.instructions import (
    Instruction,
    get_associated_token_address,
    initialize_mint,
    is_on_curve,
    mint_to,
    token_transfer,
    transfer_sol,
)

MAX_DECIMALS = 9
MAX_LAMPORTS = 1_000_000_000_000_000
_U64_MAX = 2**64 - 1
_U8_MAX = 255
_DESERIALIZE_PREFIX = "Failed to deserialize the JSON body into the target type"


class ApiError(Exception):
    """A request failure carrying an HTTP status and an error message."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = HTTPStatus(status)
        self.message = message

    @property
    def body(self) -> dict:
        """The JSON error body sent to the client."""
        return {"success": False, "error": self.message}


def _success(data: Any) -> dict:
    return {"success": True, "data": data}


def _bad_request(message: str) -> ApiError:
    return ApiError(HTTPStatus.BAD_REQUEST, message)


def _unprocessable(detail: str) -> ApiError:
    return ApiError(HTTPStatus.UNPROCESSABLE_ENTITY, f"{_DESERIALIZE_PREFIX}: {detail}")


def _require_object(payload: Any) -> Mapping:
    if not isinstance(payload, Mapping):
        raise _unprocessable("invalid type: expected a JSON object")
    return payload


def _string(payload: Mapping, name: str) -> str:
    if name not in payload:
        raise _unprocessable(f"missing field `{name}`")
    value = payload[name]
    if not isinstance(value, str):
        raise _unprocessable(f"invalid type for `{name}`: expected a string")
    return value


def _unsigned(payload: Mapping, name: str, maximum: int) -> int:
    if name not in payload:
        raise _unprocessable(f"missing field `{name}`")
    value = payload[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise _unprocessable(f"invalid type for `{name}`: expected an unsigned integer")
    if not 0 <= value <= maximum:
        raise _unprocessable(f"invalid value for `{name}`: expected an integer in 0..={maximum}")
    return value


def _pubkey(value: str, label: str):
    try:
        return validate_pubkey(value)
    except ValidationError as exc:
        raise _bad_request(f"{label}: {exc}") from exc


def _build(factory, *args) -> Instruction:
    try:
        return factory(*args)
    except ValueError as exc:
        raise ApiError(
            HTTPStatus.INTERNAL_SERVER_ERROR, f"Failed to create instruction: {exc}"
        ) from exc


def _instruction_body(instruction: Instruction) -> dict:
    return {
        "program_id": str(instruction.program_id),
        "accounts": [meta.to_dict() for meta in instruction.accounts],
        "instruction_data": encode_base64(instruction.data),
    }


def generate_keypair() -> dict:
    """Create a fresh keypair; the secret is the base58 of seed and public key."""
    signing_key = nacl.signing.SigningKey.generate()
    public = bytes(signing_key.verify_key)
    return _success(
        {
            "pubkey": encode_base58(public),
            "secret": encode_base58(bytes(signing_key) + public),
        }
    )


def sign_message(payload: Any) -> dict:
    """Sign a UTF-8 message with the first 32 bytes of a base58 keypair secret."""
    payload = _require_object(payload)
    message = _string(payload, "message")
    secret = _string(payload, "secret")
    if not message or not secret:
        raise _bad_request("Missing required fields")

    try:
        key_bytes = validate_private_key(secret)
    except ValidationError as exc:
        raise _bad_request(f"Invalid private key: {exc}") from exc

    signing_key = nacl.signing.SigningKey(key_bytes[:32])
    signature = signing_key.sign(message.encode("utf-8")).signature
    return _success(
        {
            "signature": encode_base64(signature),
            "public_key": encode_base58(bytes(signing_key.verify_key)),
            "message": message,
        }
    )


def verify_message(payload: Any) -> dict:
    """Check a base64 signature of a message against a base58 public key."""
    payload = _require_object(payload)
    message = _string(payload, "message")
    signature_text = _string(payload, "signature")
    pubkey_text = _string(payload, "pubkey")
    if not message or not signature_text or not pubkey_text:
        raise _bad_request("Missing required fields")

    try:
        public_bytes = decode_base58(pubkey_text)
    except ValidationError as exc:
        raise _bad_request(f"Invalid public key: {exc}") from exc
    if len(public_bytes) != 32:
        raise _bad_request("Invalid public key: public key must be 32 bytes")
    if not is_on_curve(public_bytes):
        raise _bad_request("Invalid public key: point is not on the curve")

    try:
        signature = decode_base64(signature_text)
    except ValidationError as exc:
        raise _bad_request(f"Invalid signature: {exc}") from exc
    if len(signature) != 64:
        raise _bad_request("Invalid signature: signature must be 64 bytes")

    try:
        nacl.signing.VerifyKey(public_bytes).verify(message.encode("utf-8"), signature)
        valid = True
    except (nacl.exceptions.CryptoError, ValueError):
        valid = False

    return _success({"valid": valid, "message": message, "pubkey": pubkey_text})


def create_token(payload: Any) -> dict:
    """Build an InitializeMint instruction; the mint authority also freezes."""
    payload = _require_object(payload)
    authority_text = _string(payload, "mintAuthority")
    mint_text = _string(payload, "mint")
    decimals = _unsigned(payload, "decimals", _U8_MAX)

    mint_authority = _pubkey(authority_text, "Invalid mint authority")
    mint = _pubkey(mint_text, "Invalid mint")
    if decimals > MAX_DECIMALS:
        raise _bad_request("Decimals must be between 0 and 9")

    instruction = _build(initialize_mint, mint, mint_authority, mint_authority, decimals)
    return _success(_instruction_body(instruction))


def mint_token(payload: Any) -> dict:
    """Build a MintTo instruction."""
    payload = _require_object(payload)
    mint_text = _string(payload, "mint")
    destination_text = _string(payload, "destination")
    authority_text = _string(payload, "authority")
    amount = _unsigned(payload, "amount", _U64_MAX)

    mint = _pubkey(mint_text, "Invalid mint")
    destination = _pubkey(destination_text, "Invalid destination")
    authority = _pubkey(authority_text, "Invalid authority")
    if amount == 0:
        raise _bad_request("Amount must be greater than 0")

    instruction = _build(mint_to, mint, destination, authority, amount)
    return _success(_instruction_body(instruction))


def send_sol(payload: Any) -> dict:
    """Build a system-program lamport transfer."""
    payload = _require_object(payload)
    from_text = _string(payload, "from")
    to_text = _string(payload, "to")
    lamports = _unsigned(payload, "lamports", _U64_MAX)

    sender = _pubkey(from_text, "Invalid from address")
    recipient = _pubkey(to_text, "Invalid to address")
    if lamports == 0:
        raise _bad_request("Lamports must be greater than 0")
    if sender == recipient:
        raise _bad_request("From and to addresses cannot be the same")
    if lamports > MAX_LAMPORTS:
        raise _bad_request("Lamport amount too large")

    instruction = transfer_sol(sender, recipient, lamports)
    return _success(
        {
            "program_id": str(instruction.program_id),
            "accounts": [str(meta.pubkey) for meta in instruction.accounts],
            "instruction_data": encode_base64(instruction.data),
        }
    )


def send_token(payload: Any) -> dict:
    """Build a token Transfer instruction on the destination's associated account."""
    payload = _require_object(payload)
    destination_text = _string(payload, "destination")
    mint_text = _string(payload, "mint")
    owner_text = _string(payload, "owner")
    amount = _unsigned(payload, "amount", _U64_MAX)

    destination = _pubkey(destination_text, "Invalid destination")
    mint = _pubkey(mint_text, "Invalid mint")
    owner = _pubkey(owner_text, "Invalid owner")
    if amount == 0:
        raise _bad_request("Amount must be greater than 0")

    destination_ata = get_associated_token_address(destination, mint)
    instruction = _build(token_transfer, destination_ata, destination_ata, owner, amount)
    return _success(_instruction_body(instruction))