"""
Solana-style message builder.

Produces legacy (unversioned) messages:

    header[3] || compact(n) || keys[n * 32] || blockhash[32]
              || compact(m) || instructions

with each instruction laid out as
``programIndex || compact(k) || indices[k] || compact(len) || data``.
Counts use the compact-u16 ("shortvec") encoding.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..errors import InvalidAddress, IntegerOutOfRange
from ..keys.ed25519 import KEY_SIZE, is_on_curve, parse_solana_address, solana_address
from ..utils import sha256

SYSTEM_PROGRAM_ID = parse_solana_address("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = parse_solana_address("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = parse_solana_address("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

SYSTEM_TRANSFER = 2
TOKEN_TRANSFER = 3
ATA_CREATE_IDEMPOTENT = 1

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16
PDA_MARKER = b"ProgramDerivedAddress"


def encode_compact_u16(value: int) -> bytes:
    if not 0 <= value <= 0xFFFF:
        raise IntegerOutOfRange(f"compact-u16 value out of range: {value}", value=value)
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _u64_le(amount: int) -> bytes:
    if not 0 <= amount < 1 << 64:
        raise IntegerOutOfRange(f"Amount does not fit u64: {amount}", value=amount)
    return struct.pack("<Q", amount)


# ============ Instructions ============


@dataclass(frozen=True)
class AccountMeta:
    pubkey: bytes
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True)
class Instruction:
    program_id: bytes
    accounts: tuple[AccountMeta, ...]
    data: bytes


def system_transfer(source: bytes, destination: bytes, lamports: int) -> Instruction:
    """System program transfer: u32 LE discriminator 2, u64 LE lamports."""
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(source, is_signer=True, is_writable=True),
            AccountMeta(destination, is_signer=False, is_writable=True),
        ),
        data=struct.pack("<I", SYSTEM_TRANSFER) + _u64_le(lamports),
    )


def token_transfer(source: bytes, destination: bytes, owner: bytes, amount: int) -> Instruction:
    """Token program transfer: u8 discriminator 3, u64 LE amount."""
    return Instruction(
        program_id=TOKEN_PROGRAM_ID,
        accounts=(
            AccountMeta(source, is_signer=False, is_writable=True),
            AccountMeta(destination, is_signer=False, is_writable=True),
            AccountMeta(owner, is_signer=True, is_writable=False),
        ),
        data=bytes([TOKEN_TRANSFER]) + _u64_le(amount),
    )


def create_associated_account_idempotent(
    payer: bytes, associated: bytes, owner: bytes, mint: bytes
) -> Instruction:
    return Instruction(
        program_id=ASSOCIATED_TOKEN_PROGRAM_ID,
        accounts=(
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(associated, is_signer=False, is_writable=True),
            AccountMeta(owner, is_signer=False, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        ),
        data=bytes([ATA_CREATE_IDEMPOTENT]),
    )


# ============ Messages ============


@dataclass(frozen=True)
class CompiledInstruction:
    program_index: int
    account_indices: tuple[int, ...]
    data: bytes

    def serialize(self) -> bytes:
        return (
            bytes([self.program_index])
            + encode_compact_u16(len(self.account_indices))
            + bytes(self.account_indices)
            + encode_compact_u16(len(self.data))
            + self.data
        )


@dataclass(frozen=True)
class Message:
    num_required_signatures: int
    num_readonly_signed: int
    num_readonly_unsigned: int
    account_keys: tuple[bytes, ...]
    recent_blockhash: bytes
    instructions: tuple[CompiledInstruction, ...] = field(default_factory=tuple)

    @property
    def header(self) -> bytes:
        return bytes([self.num_required_signatures, self.num_readonly_signed, self.num_readonly_unsigned])

    def serialize(self) -> bytes:
        return b"".join(
            [
                self.header,
                encode_compact_u16(len(self.account_keys)),
                *self.account_keys,
                self.recent_blockhash,
                encode_compact_u16(len(self.instructions)),
                *(ix.serialize() for ix in self.instructions),
            ]
        )


def compile_message(payer: bytes, instructions: Sequence[Instruction], recent_blockhash: bytes) -> Message:
    """
    Compile instructions into a message.

    Keys are deduplicated (signer/writable flags OR-ed) and ordered:
    fee payer, writable signers, readonly signers, writable non-signers,
    readonly non-signers. Program ids are readonly non-signers.
    """
    if len(recent_blockhash) != KEY_SIZE:
        raise InvalidAddress(f"Blockhash must be {KEY_SIZE} bytes, got {len(recent_blockhash)}.")

    flags: dict[bytes, list[bool]] = {payer: [True, True]}

    def add(pubkey: bytes, is_signer: bool, is_writable: bool) -> None:
        if len(pubkey) != KEY_SIZE:
            raise InvalidAddress(f"Account key must be {KEY_SIZE} bytes, got {len(pubkey)}.")
        current = flags.setdefault(pubkey, [False, False])
        current[0] |= is_signer
        current[1] |= is_writable

    for ix in instructions:
        for meta in ix.accounts:
            add(meta.pubkey, meta.is_signer, meta.is_writable)
        add(ix.program_id, False, False)

    def rank(item: tuple[bytes, list[bool]]) -> int:
        pubkey, (is_signer, is_writable) = item
        if pubkey == payer:
            return -1
        return (0 if is_signer else 2) + (0 if is_writable else 1)

    ordered = sorted(flags.items(), key=rank)
    keys = tuple(pubkey for pubkey, _ in ordered)
    index = {pubkey: i for i, pubkey in enumerate(keys)}

    compiled = tuple(
        CompiledInstruction(
            program_index=index[ix.program_id],
            account_indices=tuple(index[meta.pubkey] for meta in ix.accounts),
            data=ix.data,
        )
        for ix in instructions
    )

    return Message(
        num_required_signatures=sum(1 for _, (s, _w) in ordered if s),
        num_readonly_signed=sum(1 for _, (s, w) in ordered if s and not w),
        num_readonly_unsigned=sum(1 for _, (s, w) in ordered if not s and not w),
        account_keys=keys,
        recent_blockhash=bytes(recent_blockhash),
        instructions=compiled,
    )


def build_transfer_message(owner: str, destination: str, lamports: int, recent_blockhash: str) -> Message:
    """Native transfer of ``lamports`` from ``owner`` to ``destination``."""
    owner_key = parse_solana_address(owner)
    return compile_message(
        owner_key,
        [system_transfer(owner_key, parse_solana_address(destination), lamports)],
        parse_solana_address(recent_blockhash),
    )


def build_token_transfer_message(
    owner: str,
    destination_owner: str,
    mint: str,
    amount: int,
    recent_blockhash: str,
    create_destination_account: bool = False,
    legacy_derivation: bool = False,
) -> Message:
    """Token transfer between the associated accounts of two owners.

    With ``create_destination_account`` an idempotent create instruction
    for the recipient's associated account is prepended.
    """
    owner_key = parse_solana_address(owner)
    recipient_key = parse_solana_address(destination_owner)
    mint_key = parse_solana_address(mint)

    source = associated_token_address(owner_key, mint_key, legacy=legacy_derivation)
    destination = associated_token_address(recipient_key, mint_key, legacy=legacy_derivation)

    instructions = []
    if create_destination_account:
        instructions.append(
            create_associated_account_idempotent(owner_key, destination, recipient_key, mint_key)
        )
    instructions.append(token_transfer(source, destination, owner_key, amount))

    return compile_message(owner_key, instructions, parse_solana_address(recent_blockhash))


def wire_transaction(message: Message, signatures: Sequence[bytes]) -> bytes:
    """Signed transaction: compact signature count, signatures, message."""
    if len(signatures) != message.num_required_signatures:
        raise IntegerOutOfRange(
            f"Message needs {message.num_required_signatures} signatures, got {len(signatures)}."
        )
    return encode_compact_u16(len(signatures)) + b"".join(signatures) + message.serialize()


# ============ Program-derived addresses ============


def create_program_address(seeds: Sequence[bytes], program_id: bytes) -> Optional[bytes]:
    """Hash seeds into a program address; None if the result is on the curve."""
    if len(seeds) > MAX_SEEDS or any(len(seed) > MAX_SEED_LENGTH for seed in seeds):
        raise InvalidAddress("Program address seeds exceed the allowed size.")
    candidate = sha256(b"".join(seeds) + program_id + PDA_MARKER)
    if is_on_curve(candidate):
        return None
    return candidate


def find_program_address(seeds: Sequence[bytes], program_id: bytes) -> tuple[bytes, int]:
    """Canonical bump search, 255 down to 0."""
    for bump in range(255, -1, -1):
        address = create_program_address([*seeds, bytes([bump])], program_id)
        if address is not None:
            return address, bump
    raise InvalidAddress("Unable to find a viable program address bump seed.")


def associated_token_address(owner: bytes, mint: bytes, legacy: bool = False) -> bytes:
    """
    Associated token account of ``owner`` for ``mint``.

    The default is the canonical program-derived address, matching
    standard wallets. ``legacy=True`` reproduces the older plain-hash
    derivation, ``sha256(owner || token_program || mint)``, whose
    addresses do NOT match accounts created by other wallets.
    """
    if legacy:
        return sha256(owner + TOKEN_PROGRAM_ID + mint)
    address, _bump = find_program_address([owner, TOKEN_PROGRAM_ID, mint], ASSOCIATED_TOKEN_PROGRAM_ID)
    return address


def associated_token_address_str(owner: str, mint: str, legacy: bool = False) -> str:
    address = associated_token_address(parse_solana_address(owner), parse_solana_address(mint), legacy=legacy)
    return solana_address(address)
