import base64

import pytest

from solapi.encoding import Pubkey, decode_base58, encode_base58, encode_base64
from solapi.handlers import (
    ApiError,
    create_token,
    generate_keypair,
    mint_token,
    send_sol,
    send_token,
    sign_message,
    verify_message,
)
from solapi.instructions import get_associated_token_address

SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
RENT_SYSVAR = "SysvarRent111111111111111111111111111111111"


def _key(n: int) -> Pubkey:
    return Pubkey(bytes([n]) * 32)


A, B, C = _key(1), _key(2), _key(3)


# --- keypair -------------------------------------------------------------

def test_generate_keypair_secret_ends_with_pubkey():
    result = generate_keypair()
    assert result["success"] is True
    secret = decode_base58(result["data"]["secret"])
    public = decode_base58(result["data"]["pubkey"])
    assert len(secret) == 64
    assert secret[32:] == public


def test_generated_keypair_signs_and_verifies():
    keys = generate_keypair()["data"]
    signed = sign_message({"message": "hello", "secret": keys["secret"]})["data"]
    assert signed["public_key"] == keys["pubkey"]
    verified = verify_message(
        {"message": "hello", "signature": signed["signature"], "pubkey": keys["pubkey"]}
    )
    assert verified["data"]["valid"] is True


# --- message signing ------------------------------------------------------

RFC_SEED = bytes.fromhex("4ccd089b28ff96da9db6c346ec114e0f5b8a319f35aba624da8cf6ed4fb8a6fb")
RFC_PUBLIC = bytes.fromhex("3d4017c3e843895a92b70aa74d1b7ebc9c982ccf2ec4968cc0cd55f12af4660c")
RFC_SIGNATURE = bytes.fromhex(
    "92a009a9f0d4cab8720e820b5f642540a2b27b5416503f8fb3762223ebdb69da"
    "085ac1e43e15996e458f3613d0f11d8c387b2eaeb4302aeeb00d291612bb0c00"
)


def test_sign_message_known_vector():
    secret = encode_base58(RFC_SEED + RFC_PUBLIC)
    result = sign_message({"message": "r", "secret": secret})
    assert result["success"] is True
    assert result["data"]["signature"] == base64.b64encode(RFC_SIGNATURE).decode()
    assert result["data"]["public_key"] == encode_base58(RFC_PUBLIC)
    assert result["data"]["message"] == "r"


def test_public_key_is_derived_from_seed_not_tail():
    secret = encode_base58(RFC_SEED + bytes(32))
    result = sign_message({"message": "r", "secret": secret})
    assert result["data"]["public_key"] == encode_base58(RFC_PUBLIC)


def test_verify_known_vector_and_tampered_message():
    payload = {
        "message": "r",
        "signature": encode_base64(RFC_SIGNATURE),
        "pubkey": encode_base58(RFC_PUBLIC),
    }
    assert verify_message(payload)["data"] == {
        "valid": True,
        "message": "r",
        "pubkey": payload["pubkey"],
    }
    payload["message"] = "s"
    assert verify_message(payload)["data"]["valid"] is False


@pytest.mark.parametrize(
    "payload",
    [{"message": "", "secret": "secret"}, {"message": "hi", "secret": ""}],
)
def test_sign_missing_fields(payload):
    with pytest.raises(ApiError) as info:
        sign_message(payload)
    assert info.value.status == 400
    assert info.value.body == {"success": False, "error": "Missing required fields"}


def test_sign_rejects_short_key():
    with pytest.raises(ApiError) as info:
        sign_message({"message": "hi", "secret": encode_base58(bytes([7]) * 32)})
    assert info.value.status == 400
    assert info.value.message == "Invalid private key: Private key must be 64 bytes"


def test_sign_rejects_bad_base58():
    # lower-case "l" is outside the base58 alphabet
    with pytest.raises(ApiError) as info:
        sign_message({"message": "hi", "secret": "placeholder"})
    assert info.value.message.startswith("Invalid private key: ")


def test_sign_missing_key_is_unprocessable():
    with pytest.raises(ApiError) as info:
        sign_message({"message": "hi"})
    assert info.value.status == 422
    assert "secret" in info.value.message


def test_verify_missing_fields():
    with pytest.raises(ApiError) as info:
        verify_message({"message": "x", "signature": "", "pubkey": str(A)})
    assert info.value.message == "Missing required fields"


def test_verify_bad_public_key():
    with pytest.raises(ApiError) as info:
        verify_message({"message": "x", "signature": "AAAA", "pubkey": "0OIl"})
    assert info.value.status == 400
    assert info.value.message.startswith("Invalid public key: ")


def test_verify_bad_signature_encoding():
    with pytest.raises(ApiError) as info:
        verify_message(
            {"message": "x", "signature": "***", "pubkey": encode_base58(RFC_PUBLIC)}
        )
    assert info.value.message.startswith("Invalid signature: ")


def test_verify_wrong_signature_length():
    with pytest.raises(ApiError) as info:
        verify_message(
            {
                "message": "x",
                "signature": encode_base64(bytes(10)),
                "pubkey": encode_base58(RFC_PUBLIC),
            }
        )
    assert info.value.message.startswith("Invalid signature: ")


# --- token create / mint --------------------------------------------------

def test_create_token_layout():
    data = create_token({"mintAuthority": str(A), "mint": str(B), "decimals": 6})["data"]
    assert data["program_id"] == TOKEN_PROGRAM
    assert data["accounts"] == [
        {"pubkey": str(B), "is_signer": False, "is_writable": True},
        {"pubkey": RENT_SYSVAR, "is_signer": False, "is_writable": False},
    ]
    raw = base64.b64decode(data["instruction_data"])
    assert raw[0] == 0
    assert raw[1] == 6
    assert raw[2:34] == bytes(A)
    assert raw[34] == 1
    assert raw[35:67] == bytes(A)


def test_create_token_decimals_limit():
    with pytest.raises(ApiError) as info:
        create_token({"mintAuthority": str(A), "mint": str(B), "decimals": 10})
    assert info.value.status == 400
    assert info.value.message == "Decimals must be between 0 and 9"


def test_create_token_decimals_out_of_u8():
    with pytest.raises(ApiError) as info:
        create_token({"mintAuthority": str(A), "mint": str(B), "decimals": 300})
    assert info.value.status == 422


def test_create_token_bad_authority():
    with pytest.raises(ApiError) as info:
        create_token({"mintAuthority": "bad!", "mint": str(B), "decimals": 1})
    assert info.value.message.startswith("Invalid mint authority: Invalid pubkey: ")


def test_create_token_requires_camel_case_field():
    with pytest.raises(ApiError) as info:
        create_token({"mint_authority": str(A), "mint": str(B), "decimals": 1})
    assert info.value.status == 422
    assert "mintAuthority" in info.value.message


def test_mint_token_layout():
    data = mint_token(
        {"mint": str(A), "destination": str(B), "authority": str(C), "amount": 500}
    )["data"]
    assert data["program_id"] == TOKEN_PROGRAM
    assert [a["pubkey"] for a in data["accounts"]] == [str(A), str(B), str(C)]
    assert data["accounts"][2]["is_signer"] is True
    raw = base64.b64decode(data["instruction_data"])
    assert raw[0] == 7
    assert int.from_bytes(raw[1:], "little") == 500


def test_mint_token_zero_amount():
    with pytest.raises(ApiError) as info:
        mint_token({"mint": str(A), "destination": str(B), "authority": str(C), "amount": 0})
    assert info.value.message == "Amount must be greater than 0"


def test_mint_token_rejects_float_amount():
    with pytest.raises(ApiError) as info:
        mint_token({"mint": str(A), "destination": str(B), "authority": str(C), "amount": 1.5})
    assert info.value.status == 422


# --- send -----------------------------------------------------------------

def test_send_sol_layout():
    data = send_sol({"from": str(A), "to": str(B), "lamports": 1000})["data"]
    assert data["program_id"] == SYSTEM_PROGRAM
    assert data["accounts"] == [str(A), str(B)]
    raw = base64.b64decode(data["instruction_data"])
    assert int.from_bytes(raw[:4], "little") == 2
    assert int.from_bytes(raw[4:], "little") == 1000


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"from": str(A), "to": str(B), "lamports": 0}, "Lamports must be greater than 0"),
        ({"from": str(A), "to": str(A), "lamports": 5}, "From and to addresses cannot be the same"),
        (
            {"from": str(A), "to": str(B), "lamports": 1_000_000_000_000_001},
            "Lamport amount too large",
        ),
    ],
)
def test_send_sol_errors(payload, message):
    with pytest.raises(ApiError) as info:
        send_sol(payload)
    assert info.value.status == 400
    assert info.value.message == message


def test_send_sol_upper_bound_accepted():
    data = send_sol({"from": str(A), "to": str(B), "lamports": 1_000_000_000_000_000})["data"]
    raw = base64.b64decode(data["instruction_data"])
    assert int.from_bytes(raw[4:], "little") == 1_000_000_000_000_000


def test_send_sol_bad_address_order():
    with pytest.raises(ApiError) as info:
        send_sol({"from": "bad", "to": "bad", "lamports": 0})
    assert info.value.message.startswith("Invalid from address: ")


def test_send_token_uses_destination_ata_twice():
    data = send_token(
        {"destination": str(A), "mint": str(B), "owner": str(C), "amount": 42}
    )["data"]
    ata = str(get_associated_token_address(A, B))
    assert data["program_id"] == TOKEN_PROGRAM
    assert data["accounts"] == [
        {"pubkey": ata, "is_signer": False, "is_writable": True},
        {"pubkey": ata, "is_signer": False, "is_writable": True},
        {"pubkey": str(C), "is_signer": True, "is_writable": False},
    ]
    raw = base64.b64decode(data["instruction_data"])
    assert raw[0] == 3
    assert int.from_bytes(raw[1:], "little") == 42


def test_send_token_errors():
    with pytest.raises(ApiError) as info:
        send_token({"destination": str(A), "mint": "nope", "owner": str(C), "amount": 1})
    assert info.value.message.startswith("Invalid mint: ")
    with pytest.raises(ApiError) as info:
        send_token({"destination": str(A), "mint": str(B), "owner": str(C), "amount": 0})
    assert info.value.message == "Amount must be greater than 0"


def test_non_object_payload_rejected():
    with pytest.raises(ApiError) as info:
        send_token(["not", "an", "object"])
    assert info.value.status == 422
    assert info.value.body["success"] is False