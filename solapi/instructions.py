"""Builders for system-transfer and token-program instructions."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Iterable

from solapi.encoding import Pubkey

SYSTEM_PROGRAM_ID = Pubkey(bytes(32))
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
SYSVAR_RENT_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

MAX_SEEDS = 16
MAX_SEED_LEN = 32
_PDA_MARKER = b"ProgramDerivedAddress"

_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P

_SYSTEM_TRANSFER = 2
_TOKEN_INITIALIZE_MINT = 0
_TOKEN_TRANSFER = 3
_TOKEN_MINT_TO = 7


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    def to_dict(self) -> dict:
        return {
            "pubkey": str(self.pubkey),
            "is_signer": self.is_signer,
            "is_writable": self.is_writable,
        }


@dataclass(frozen=True)
class Instruction:
    """A program id, its accounts and the serialized instruction data."""

    program_id: Pubkey
    accounts: tuple[AccountMeta, ...] = field(default_factory=tuple)
    data: bytes = b""


def _u64(value: int, name: str) -> bytes:
    if not 0 <= value < 2**64:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer")
    return value.to_bytes(8, "little")


def is_on_curve(data: bytes) -> bool:
    """Whether 32 bytes decompress to a point on the ed25519 curve."""
    data = bytes(data)
    if len(data) != 32:
        return False
    y = (int.from_bytes(data, "little") & ((1 << 255) - 1)) % _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    if v == 0:
        return u == 0
    x2 = u * pow(v, _P - 2, _P) % _P
    return x2 == 0 or pow(x2, (_P - 1) // 2, _P) == 1


def find_program_address(seeds: Iterable[bytes], program_id: Pubkey) -> tuple[Pubkey, int]:
    """Derive an off-curve address and its bump seed from seeds and a program id."""
    seed_list = [bytes(seed) for seed in seeds]
    if len(seed_list) >= MAX_SEEDS:
        raise ValueError("Too many seeds")
    if any(len(seed) > MAX_SEED_LEN for seed in seed_list):
        raise ValueError("Seed is too long")
    prefix = b"".join(seed_list)
    for bump in range(255, -1, -1):
        digest = hashlib.sha256(
            prefix + bytes([bump]) + bytes(program_id) + _PDA_MARKER
        ).digest()
        if not is_on_curve(digest):
            return Pubkey(digest), bump
    raise ValueError("Unable to find a viable program address bump seed")


def get_associated_token_address(wallet: Pubkey, mint: Pubkey) -> Pubkey:
    """The associated token account address for a wallet and mint."""
    address, _ = find_program_address(
        [bytes(wallet), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def transfer_sol(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    """A system-program transfer of lamports."""
    data = _SYSTEM_TRANSFER.to_bytes(4, "little") + _u64(lamports, "lamports")
    return Instruction(
        SYSTEM_PROGRAM_ID,
        (AccountMeta(from_pubkey, True, True), AccountMeta(to_pubkey, False, True)),
        data,
    )


def initialize_mint(
    mint: Pubkey, mint_authority: Pubkey, freeze_authority: Pubkey | None, decimals: int
) -> Instruction:
    """A token-program InitializeMint instruction."""
    if not 0 <= decimals <= 255:
        raise ValueError("decimals must fit in an unsigned 8-bit integer")
    data = bytes([_TOKEN_INITIALIZE_MINT, decimals]) + bytes(mint_authority)
    if freeze_authority is None:
        data += b"\x00"
    else:
        data += b"\x01" + bytes(freeze_authority)
    return Instruction(
        TOKEN_PROGRAM_ID,
        (AccountMeta(mint, False, True), AccountMeta(SYSVAR_RENT_ID, False, False)),
        data,
    )


def mint_to(mint: Pubkey, destination: Pubkey, authority: Pubkey, amount: int) -> Instruction:
    """A token-program MintTo instruction with a single signing authority."""
    data = bytes([_TOKEN_MINT_TO]) + _u64(amount, "amount")
    return Instruction(
        TOKEN_PROGRAM_ID,
        (
            AccountMeta(mint, False, True),
            AccountMeta(destination, False, True),
            AccountMeta(authority, True, False),
        ),
        data,
    )


def token_transfer(source: Pubkey, destination: Pubkey, owner: Pubkey, amount: int) -> Instruction:
    """A token-program Transfer instruction with a single signing owner."""
    data = bytes([_TOKEN_TRANSFER]) + _u64(amount, "amount")
    return Instruction(
        TOKEN_PROGRAM_ID,
        (
            AccountMeta(source, False, True),
            AccountMeta(destination, False, True),
            AccountMeta(owner, True, False),
        ),
        data,
    )