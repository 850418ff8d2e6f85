# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""clientsmith CLI: perform one manifest call from the shell."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from ..config import Configs, load_configs
from ..errors import ClientsmithError, ResponseError
from ..http.models import Response
from ..log import setup_logging
from ..runtime import forge

CLI_TEXT_TRUNCATION_BYTES = 4096

EXIT_OK = 0
EXIT_RESPONSE_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call a resource method described by a clientsmith manifest")
    parser.add_argument("manifest", help="Path to a JSON manifest")
    parser.add_argument("resource", help="Resource name, e.g. User")
    parser.add_argument("method", help="Method name, e.g. byId")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Call parameter (repeatable)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Extra request header (repeatable)",
    )
    parser.add_argument("--body", help="Raw request body")
    parser.add_argument("--timeout", type=int, help="Timeout in milliseconds")
    parser.add_argument(
        "--emulate-http",
        action="store_true",
        help="Send PUT/PATCH/DELETE as POST with a method override",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of status line and body",
    )
    parser.add_argument("--log-level", help="Logging level (default from CLIENTSMITH_LOG_LEVEL)")
    return parser


def _split_pairs(values: list[str], separator: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition(separator)
        if not sep or not key.strip():
            raise ValueError(f"expected NAME{separator}VALUE, got {item!r}")
        pairs[key.strip()] = value.strip() if separator == ":" else value
    return pairs


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    return raw[: max(keep, 0)].decode("utf-8", errors="ignore") + suffix


def _response_payload(response: Response) -> dict[str, Any]:
    data = response.data()
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        data = _truncate_text_bytes(data, CLI_TEXT_TRUNCATION_BYTES)
    return {
        "url": response.request().url(),
        "status": response.status(),
        "success": response.success(),
        "headers": response.headers(),
        "data": data,
        "time_elapsed": response.time_elapsed,
    }


def _print_response(response: Response, as_json: bool) -> None:
    payload = _response_payload(response)
    if as_json:
        json.dump(payload, sys.stdout, indent=2, sort_keys=True, default=str)
        sys.stdout.write("\n")
        return
    elapsed = payload["time_elapsed"] or 0.0
    print(f"{payload['status']} {payload['url']} ({elapsed:.1f}ms)")
    data = payload["data"]
    if data is None:
        return
    print(data if isinstance(data, str) else json.dumps(data, indent=2, sort_keys=True))


def _load_manifest(path: str) -> dict[str, Any]:
    manifest = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(manifest, dict):
        raise ValueError(f"{path}: manifest must be a JSON object")
    return manifest


async def _call(settings: Configs, manifest: dict[str, Any], args: argparse.Namespace) -> Response:
    client = forge(manifest, settings)
    descriptor = client._manifest.descriptor(args.resource, args.method)

    params: dict[str, Any] = _split_pairs(args.param, "=")
    headers = _split_pairs(args.header, ":")
    if headers:
        params[descriptor.headers_attr] = headers
    if args.body is not None:
        params[descriptor.body_attr] = args.body
    if args.timeout:
        params[descriptor.timeout_attr] = args.timeout
    return await client[args.resource][args.method](params)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = load_configs()
    if args.emulate_http:
        settings.gateway_configs.emulate_http = True
    if args.ignore_ssl_errors:
        settings.gateway_configs.httpx.verify_ssl = False

    try:
        manifest = _load_manifest(args.manifest)
        response = asyncio.run(_call(settings, manifest, args))
    except ResponseError as exc:
        _print_response(exc.response, args.json)
        return EXIT_RESPONSE_ERROR
    except KeyError as exc:
        print(f"error: unknown resource or method {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (ClientsmithError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    _print_response(response, args.json)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
