# solapi

solapi is a small JSON-over-HTTP service. It builds Solana instructions and signs and verifies
ed25519 messages. It does no network I/O beyond serving its own HTTP endpoints. Each
instruction endpoint returns the instruction's program id, its accounts and its data encoded
in base64. The signing endpoints return a signing or verification result.

## Install

```
pip install .
```

## Run

```
solapi
```

By default the server listens on `127.0.0.1:3000`. Use `--host` and `--port` to change the
address. Run `solapi --help` to see the options.

The `SOLAPI_LOG` environment variable sets the log level, for example `debug` or `warning`.
The default is `info`.

Every response carries permissive CORS headers. An `OPTIONS` preflight request to any path
returns 200.

## Endpoints

All routes take and return JSON. A successful response looks like this:

```
{"success": true, "data": ...}
```

A failed request gets a JSON body of the form `{"success": false, "error": "..."}` and one of
these status codes:

- **400** for invalid values, such as a bad public key or a zero amount. A body that is not
  valid JSON also gets 400.
- **422** when a field is missing or has the wrong type.
- **500** when an instruction cannot be built.

An unknown path returns 404 and a wrong method returns 405. Neither has a body.

| Method | Path              | Body fields                                   |
|--------|-------------------|-----------------------------------------------|
| GET    | `/health`         | none                                          |
| POST   | `/keypair`        | none                                          |
| POST   | `/token/create`   | `mintAuthority`, `mint`, `decimals` (0-9)     |
| POST   | `/token/mint`     | `mint`, `destination`, `authority`, `amount`  |
| POST   | `/message/sign`   | `message`, `secret` (base58, 64 bytes)        |
| POST   | `/message/verify` | `message`, `signature` (base64), `pubkey`     |
| POST   | `/send/sol`       | `from`, `to`, `lamports`                      |
| POST   | `/send/token`     | `destination`, `mint`, `owner`, `amount`      |

Details of some endpoints:

- **`/keypair`** returns `pubkey` and `secret`, both in base58. `secret` is the 32-byte seed
  followed by the 32-byte public key.
- **`/send/sol`** rejects these requests:
  - `lamports` of 0 or more than 10^15
  - identical `from` and `to` addresses
- **`/send/token`** builds a token Transfer whose source and destination are both the
  associated token account of `destination` for `mint`. The signer is `owner`.

Example:

```
curl -X POST http://127.0.0.1:3000/keypair
```

## Use as a library

Each handler in `solapi.handlers` is a plain function that takes the request body as a dict.
It returns the full response dict, `{"success": True, "data": ...}`. On failure it raises
`solapi.handlers.ApiError`, which has these attributes:

- `status`: an `http.HTTPStatus`
- `message`: the error text
- `body`: the JSON error body

```python
from solapi.handlers import generate_keypair, sign_message, verify_message

pair = generate_keypair()["data"]
signed = sign_message({"message": "hello", "secret": pair["secret"]})["data"]
result = verify_message({
    "message": "hello",
    "signature": signed["signature"],
    "pubkey": pair["pubkey"],
})["data"]
assert result["valid"]
```

`solapi.server.dispatch(method, path, body)` routes a request without a socket. It returns an
`(HTTPStatus, body)` pair, where `body` is `None` for 404 and 405 responses.
`solapi.server.make_server(host, port)` returns a bound `ThreadingHTTPServer` that is not yet
serving.

The instruction builders are in `solapi.instructions`:

- `transfer_sol`
- `initialize_mint`
- `mint_to`
- `token_transfer`
- `get_associated_token_address`
- `find_program_address`
- `is_on_curve`

Each builder returns an `Instruction` whose `accounts` are `AccountMeta` values.

The helpers in `solapi.encoding` work as follows:

- `encode_base58`, `decode_base58`, `encode_base64` and `decode_base64` convert between bytes
  and text.
- `Pubkey` holds a 32-byte address.
- `validate_pubkey` and `validate_private_key` parse keys from text.
- All of them raise `ValidationError` on bad input.

## What it does not do

solapi does not talk to a Solana cluster. It does not:

- build or sign whole transactions
- fetch blockhashes or balances
- submit anything

Submit the instructions it builds with other tools.

## Tests

```
pip install .[test]
pytest
```