"""
Command line interface.

    ordo cat FILE                 print the plaintext of an encrypted file
    ordo create FILE              encrypt stdin into a new file
    ordo save-as SRC DEST         write an encrypted file under a new name
    ordo recrypt FILE [--to ID]   decrypt and encrypt again

Exit status: 0 on success, 1 when a prompt was cancelled, 2 on error.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from ordo import __version__
from ordo.core.config import SUPPORTED_BACKENDS, OrdoConfig
from ordo.core.errors import OrdoError, PreconditionViolation, UserCancelled
from ordo.core.lifecycle import LifecycleController
from ordo.core.logging import get_secure_logger
from ordo.crypto import CryptoBackend, build_backend
from ordo.host.base import HostEditor
from ordo.host.console import ConsoleHost

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ordo",
        description="View and edit encrypted files without writing plaintext to disk.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--backend", choices=sorted(SUPPORTED_BACKENDS),
                        help="encryption backend (default from configuration)")
    parser.add_argument("-r", "--recipient", action="append", default=[],
                        help="default recipient, repeatable")
    parser.add_argument("--suffix", action="append", default=[],
                        help="recognized encrypted-file suffix, repeatable")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")

    commands = parser.add_subparsers(dest="command", required=True)

    cat = commands.add_parser("cat", help="print the plaintext of an encrypted file")
    cat.add_argument("file", type=Path)

    create = commands.add_parser("create", help="encrypt stdin into a new file")
    create.add_argument("file", type=Path)

    save_as = commands.add_parser("save-as", help="write an encrypted file under a new name")
    save_as.add_argument("source", type=Path)
    save_as.add_argument("target", type=Path)
    save_as.add_argument("--no-confirm", action="store_true",
                         help="overwrite an existing target without asking")

    recrypt = commands.add_parser("recrypt", help="decrypt and encrypt a file again")
    recrypt.add_argument("file", type=Path)
    recrypt.add_argument("--to", action="append", default=[], metavar="RECIPIENT",
                         help="encrypt to these recipients instead of the remembered ones")

    return parser


def _apply_arguments(config: OrdoConfig, args: argparse.Namespace) -> OrdoConfig:
    suffix = config.suffix
    if args.suffix:
        suffix = dataclasses.replace(suffix, suffixes=tuple(args.suffix))
    if args.recipient:
        suffix = dataclasses.replace(suffix, default_recipients=tuple(args.recipient))

    backend = config.backend
    if args.backend:
        backend = dataclasses.replace(backend, name=args.backend)

    return config.replace(suffix=suffix, backend=backend)


def _open_encrypted(controller: LifecycleController, path: Path):
    if not controller.host.file_exists(path):
        raise PreconditionViolation(f"{path} does not exist")
    document = controller.visit(path)
    if not document.is_transparent:
        raise PreconditionViolation(f"{path} is not a recognized encrypted file")
    return document


def run(
    args: argparse.Namespace,
    controller: LifecycleController,
    stdin: BinaryIO,
    stdout: BinaryIO,
) -> None:
    host = controller.host

    if args.command == "cat":
        document = _open_encrypted(controller, args.file)
        stdout.write(document.content)
        stdout.flush()

    elif args.command == "create":
        document = host.new_document(content=stdin.read())
        controller.ordoify(document, args.file)
        controller.save(document)

    elif args.command == "save-as":
        document = _open_encrypted(controller, args.source)
        controller.encrypted_save_as(document, args.target, confirm=not args.no_confirm)

    elif args.command == "recrypt":
        document = _open_encrypted(controller, args.file)
        if args.to:
            document.recipients = tuple(args.to)
        document.dirty = True
        controller.save(document)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    config: Optional[OrdoConfig] = None,
    host: Optional[HostEditor] = None,
    backend: Optional[CryptoBackend] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    config = _apply_arguments(config or OrdoConfig.load(), args)

    get_secure_logger(
        "ordo",
        log_dir=config.logging.log_dir,
        level="DEBUG" if args.verbose else config.logging.level,
        enable_console=config.logging.enable_console,
        enable_file=config.logging.enable_file,
        enable_json=config.logging.enable_json,
        log_format=config.logging.format,
    )
    log = logging.getLogger("ordo.cli")

    host = host or ConsoleHost()
    backend = backend or build_backend(config.backend, host.read_passphrase)
    controller = LifecycleController(host, backend, config)

    try:
        run(
            args,
            controller,
            stdin or sys.stdin.buffer,
            stdout or sys.stdout.buffer,
        )
    except UserCancelled:
        return EXIT_CANCELLED
    except OrdoError as e:
        log.debug("Command %s failed", args.command, exc_info=True)
        host.message(f"ordo: {e}")
        return EXIT_ERROR
    except OSError as e:
        host.message(f"ordo: {e.strerror or e}")
        return EXIT_ERROR

    return EXIT_OK
