"""Command line frontend for keyvault.

Commands:
  upload FILE        encrypt FILE, store it and print a share link
  download TARGET    open a share link (or object id with --key) and save the file
  list               list encrypted artifacts in the store
  delete ID          remove an artifact from the store
  share ID --key K   rebuild the share link for an artifact
  genkey             print a fresh human-readable key
  quota              show store usage
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from keyvault.core.exceptions import (
    InvalidLocatorError,
    KeyvaultError,
    MalformedNameError,
    PolicyViolation,
    StoreError,
    TamperOrKeyError,
)
from keyvault.core.locator import parse_locator
from keyvault.core.models import DenyReason, Policy
from keyvault.security.keygen import generate_human_key

from .clipboard import copy_to_clipboard
from .context import AppContext, build_context
from .logging_config import configure_logging

# Length floors are a usability guard only; the protocol accepts any non-empty secret.
MIN_UPLOAD_KEY_LENGTH = 5
MIN_DOWNLOAD_KEY_LENGTH = 3

DENY_MESSAGES = {
    DenyReason.EXPIRED: "This link has expired.",
    DenyReason.DOWNLOAD_LIMIT_EXCEEDED: "This file has reached its download limit.",
    DenyReason.SELF_DESTRUCTED: "This file was set to self-destruct after its first download.",
    DenyReason.REGION_DENIED: "This file is not available in your region.",
}


def format_bytes(size: int) -> str:
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def _safe_output_name(original_name: str, fallback: str) -> str:
    # the stored name is attacker-controlled; keep only a bare file name
    name = Path(original_name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return fallback
    return name


def _read_key(args: argparse.Namespace, prompt: str) -> str:
    if args.key:
        return args.key
    return getpass.getpass(prompt)


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def cmd_upload(ctx: AppContext, args: argparse.Namespace) -> int:
    src = Path(args.file).expanduser()
    if not src.is_file():
        print(f"error: {src} is not a file", file=sys.stderr)
        return 2

    key = args.key or generate_human_key(args.words)
    if len(key) < MIN_UPLOAD_KEY_LENGTH:
        print(
            f"error: key must be at least {MIN_UPLOAD_KEY_LENGTH} characters",
            file=sys.stderr,
        )
        return 2

    extra = {
        "max_downloads": args.max_downloads,
        "self_destruct": args.self_destruct,
        "allowed_countries": args.allow_country or None,
    }
    if args.expires_in is not None:
        policy = Policy.expiring_in(timedelta(hours=args.expires_in), **extra)
    else:
        policy = Policy(**extra)

    result = ctx.service.upload_file(src, key, policy=policy)

    print(f"Uploaded {src.name} as {result.object_id}")
    if not args.key:
        print(f"Key: {key}")
    print(f"Share link: {result.share_url}")
    if args.copy and copy_to_clipboard(result.share_url):
        print("Share link copied to clipboard.")
    return 0


def cmd_download(ctx: AppContext, args: argparse.Namespace) -> int:
    target = args.target
    if "#" in target or "/" in target:
        locator = parse_locator(target)
        object_id = locator.object_id
        key = args.key or locator.secret
    else:
        object_id = target
        key = _read_key(args, "Decryption key: ")

    if len(key) < MIN_DOWNLOAD_KEY_LENGTH:
        print(
            f"error: key must be at least {MIN_DOWNLOAD_KEY_LENGTH} characters",
            file=sys.stderr,
        )
        return 2

    opened = ctx.service.download(
        object_id, key, download_count=args.downloads, region=args.country
    )

    out = Path(args.out) if args.out else Path.cwd() / _safe_output_name(opened.original_name, object_id)
    if out.is_dir():
        out = out / _safe_output_name(opened.original_name, object_id)
    if out.exists() and not args.force:
        print(f"error: {out} already exists (use --force to overwrite)", file=sys.stderr)
        return 2

    out.write_bytes(opened.plaintext)
    print(f"Decrypted {opened.original_name} -> {out} ({format_bytes(len(opened.plaintext))})")
    return 0


def cmd_list(ctx: AppContext, args: argparse.Namespace) -> int:
    listings = ctx.service.list_artifacts()
    if not listings:
        print("No encrypted files yet.")
        return 0
    for item in listings:
        created = item.created_at.strftime("%Y-%m-%d %H:%M") if item.created_at else "-"
        print(
            f"{item.object_id}  {item.original_name}  {format_bytes(item.size)}  "
            f"{created}  [{item.policy.describe()}]"
        )
    return 0


def cmd_delete(ctx: AppContext, args: argparse.Namespace) -> int:
    ctx.service.delete(args.object_id)
    print(f"Deleted {args.object_id}")
    return 0


def cmd_share(ctx: AppContext, args: argparse.Namespace) -> int:
    key = _read_key(args, "Key: ")
    url = ctx.service.share_link(args.object_id, key)
    print(url)
    if args.copy and copy_to_clipboard(url):
        print("Share link copied to clipboard.")
    return 0


def cmd_genkey(ctx: AppContext, args: argparse.Namespace) -> int:
    print(generate_human_key(args.words))
    return 0


def cmd_quota(ctx: AppContext, args: argparse.Namespace) -> int:
    quota = ctx.service.quota()
    limit = format_bytes(quota.limit) if quota.limit is not None else "unlimited"
    print(f"Used {format_bytes(quota.usage)} of {limit}")
    return 0


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keyvault",
        description="Encrypt files into a blob store and share them with a short key.",
    )
    parser.add_argument("--store", default=None, help="Store directory (default: $KEYVAULT_STORE_ROOT or ~/.keyvault)")
    parser.add_argument("--origin", default=None, help="Origin used in share links (default: $KEYVAULT_APP_ORIGIN)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("upload", help="Encrypt and store a file")
    p.add_argument("file")
    p.add_argument("--key", default=None, help="Secret key (generated when omitted)")
    p.add_argument("--words", type=int, default=3, help="Words in a generated key (default: 3)")
    p.add_argument("--expires-in", type=float, default=None, metavar="HOURS")
    p.add_argument("--max-downloads", type=int, default=None)
    p.add_argument("--self-destruct", action="store_true")
    p.add_argument("--allow-country", action="append", default=None, metavar="CC")
    p.add_argument("--copy", action="store_true", help="Copy the share link to the clipboard")
    p.set_defaults(func=cmd_upload)

    p = sub.add_parser("download", help="Decrypt a shared file")
    p.add_argument("target", help="Share link, or object id together with --key")
    p.add_argument("--key", default=None)
    p.add_argument("--out", default=None, help="Output file or directory")
    p.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    p.add_argument("--downloads", type=int, default=0, help="Downloads already observed for this link")
    p.add_argument("--country", default=None, metavar="CC", help="Your region code")
    p.set_defaults(func=cmd_download)

    p = sub.add_parser("list", help="List encrypted files")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="Delete a stored file")
    p.add_argument("object_id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("share", help="Print the share link for a stored file")
    p.add_argument("object_id")
    p.add_argument("--key", default=None)
    p.add_argument("--copy", action="store_true")
    p.set_defaults(func=cmd_share)

    p = sub.add_parser("genkey", help="Generate a human-readable key")
    p.add_argument("--words", type=int, default=3)
    p.set_defaults(func=cmd_genkey)

    p = sub.add_parser("quota", help="Show storage usage")
    p.set_defaults(func=cmd_quota)
    return parser


def _describe_error(exc: KeyvaultError) -> str:
    if isinstance(exc, TamperOrKeyError):
        return "Wrong key or corrupted file."
    if isinstance(exc, PolicyViolation):
        return DENY_MESSAGES.get(exc.reason, str(exc))
    if isinstance(exc, MalformedNameError):
        return f"Not a keyvault file: {exc}"
    if isinstance(exc, InvalidLocatorError):
        return f"Invalid share link: {exc}"
    if isinstance(exc, StoreError):
        return f"Storage error: {exc}"
    return str(exc)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.INFO if args.verbose else logging.WARNING)

    try:
        ctx = build_context(store_root=args.store, origin=args.origin)
        return args.func(ctx, args)
    except KeyvaultError as exc:
        print(f"error: {_describe_error(exc)}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
