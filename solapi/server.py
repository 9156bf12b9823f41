"""HTTP routing and the threaded server that exposes the handlers."""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable

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

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
_LOG_ENV = "SOLAPI_LOG"

logger = logging.getLogger("solapi")


@dataclass(frozen=True)
class _Route:
    method: str
    handler: Callable[..., dict]
    takes_body: bool = True


def health_check() -> dict:
    """Report that the server is up."""
    return {"success": True, "data": "Server is healthy"}


_ROUTES: dict[str, _Route] = {
    "/keypair": _Route("POST", generate_keypair, takes_body=False),
    "/token/create": _Route("POST", create_token),
    "/token/mint": _Route("POST", mint_token),
    "/message/sign": _Route("POST", sign_message),
    "/message/verify": _Route("POST", verify_message),
    "/send/sol": _Route("POST", send_sol),
    "/send/token": _Route("POST", send_token),
    "/health": _Route("GET", health_check, takes_body=False),
}


def _parse_body(body: bytes | str | None) -> Any:
    if body is None:
        body = b""
    try:
        text = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiError(
            HTTPStatus.BAD_REQUEST, f"Failed to parse the request body as JSON: {exc}"
        ) from exc


def dispatch(method: str, path: str, body: bytes | str | None = None) -> tuple[HTTPStatus, dict | None]:
    """Route a request and return its status and JSON body (None for an empty body)."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    route = _ROUTES.get(path)
    if route is None:
        return HTTPStatus.NOT_FOUND, None
    if method.upper() != route.method:
        return HTTPStatus.METHOD_NOT_ALLOWED, None
    try:
        if route.takes_body:
            result = route.handler(_parse_body(body))
        else:
            result = route.handler()
    except ApiError as exc:
        return exc.status, exc.body
    return HTTPStatus.OK, result


class _RequestHandler(BaseHTTPRequestHandler):
    server_version = "solapi"

    def _cors_headers(self) -> None:
        origin = self.headers.get("Origin")
        self.send_header("Access-Control-Allow-Origin", origin or "*")
        self.send_header("Access-Control-Allow-Credentials", "true")
        if origin:
            self.send_header("Vary", "Origin")

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length > 0 else b""

    def _respond(self) -> None:
        status, payload = dispatch(self.command, self.path, self._read_body())
        encoded = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self._cors_headers()
        if payload is not None:
            self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        self.wfile.write(encoded)

    do_GET = _respond
    do_POST = _respond
    do_PUT = _respond
    do_DELETE = _respond
    do_PATCH = _respond

    def do_OPTIONS(self) -> None:
        self._read_body()
        self.send_response(HTTPStatus.OK)
        self._cors_headers()
        self.send_header(
            "Access-Control-Allow-Methods",
            self.headers.get("Access-Control-Request-Method") or "*",
        )
        self.send_header(
            "Access-Control-Allow-Headers",
            self.headers.get("Access-Control-Request-Headers") or "*",
        )
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def make_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> ThreadingHTTPServer:
    """Create a bound, not yet serving, HTTP server."""
    return ThreadingHTTPServer((host, port), _RequestHandler)


def main(argv: list[str] | None = None) -> None:
    """Run the API server until interrupted."""
    parser = argparse.ArgumentParser(prog="solapi", description="Instruction-building API server.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    level = os.environ.get(_LOG_ENV, "info").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))

    with make_server(args.host, args.port) as server:
        host, port = server.server_address[:2]
        logger.info("Server running on http://%s:%s", host, port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")


if __name__ == "__main__":
    main()