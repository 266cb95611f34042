"""mini-s3 CLI - command-line access to the local object store.

Usage:
    mini-s3 [--config PATH] [--data-dir PATH] put <bucket> <file>
    mini-s3 [--config PATH] [--data-dir PATH] get <bucket> <key> <out-dir> --checksum HEX
    mini-s3 [--config PATH] [--data-dir PATH] list <bucket>
    mini-s3 [--config PATH] [--data-dir PATH] delete <bucket> <key>
    mini-s3 [--config PATH] [--data-dir PATH] exists <bucket> <key>

The root directory is taken from --data-dir, then the environment
(MINI_S3_STORAGE_DATA_DIR), then the config file (default ~/.mini-s3.yaml,
created on first run), then ./data.

Exit codes:
    0: Success (for exists: the object exists)
    1: Failure (for exists: the object does not exist)
"""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from mini_s3 import __version__
from mini_s3.infrastructure.config import ConfigError, load_config
from mini_s3.infrastructure.container import Container
from mini_s3.ports.inbound import StorageError, StoragePort

SIZE_UNITS = "KMGTPE"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(num_bytes: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 KB``."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{num_bytes / div:.1f} {SIZE_UNITS[exp]}B"


def _error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def cmd_put(args: argparse.Namespace, storage: StoragePort) -> int:
    """Save a local file into a bucket under its base name."""
    source = Path(args.file)
    key = source.name

    with open(source, "rb") as fh:
        info = storage.save(args.bucket, key, fh)

    print(f"Successfully added {key} to bucket {args.bucket}")
    print(f"checksum: {info.checksum}")
    return 0


def cmd_get(args: argparse.Namespace, storage: StoragePort) -> int:
    """Verify an object and copy it into a local directory."""
    stream, info = storage.get(args.bucket, args.key, args.checksum)
    with stream:
        target = Path(args.out_dir) / info.key
        with open(target, "wb") as out:
            shutil.copyfileobj(stream, out)

    print(f"Successfully saved {info.key} to {target}")
    return 0


def cmd_list(args: argparse.Namespace, storage: StoragePort) -> int:
    """Print the objects in a bucket as a table."""
    objects = storage.list_objects(args.bucket)
    if not objects:
        print("No objects found")
        return 0

    print(f"{'CREATED':<25} {'SIZE':<10} NAME")
    print("-" * 59)
    for obj in objects:
        timestamp = obj.created_at.astimezone().strftime(TIME_FORMAT)
        print(f"{timestamp:<25} {format_size(obj.size):<10} {obj.key}")
    return 0


def cmd_delete(args: argparse.Namespace, storage: StoragePort) -> int:
    """Delete an object."""
    storage.delete(args.bucket, args.key)
    print(f"Successfully deleted {args.key} from bucket {args.bucket}")
    return 0


def cmd_exists(args: argparse.Namespace, storage: StoragePort) -> int:
    """Report whether an object exists."""
    found = storage.exists(args.bucket, args.key)
    print("true" if found else "false")
    return 0 if found else 1


COMMANDS = {
    "put": cmd_put,
    "get": cmd_get,
    "list": cmd_list,
    "delete": cmd_delete,
    "exists": cmd_exists,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mini-s3",
        description="mini-s3 - a minimal local object store with checksum verification",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        metavar="PATH",
        help="Config file (default is ~/.mini-s3.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        metavar="PATH",
        help="Path to data directory",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    put_parser = subparsers.add_parser("put", help="Add an object to a bucket")
    put_parser.add_argument("bucket", help="Bucket name")
    put_parser.add_argument("file", help="Local file to upload")

    get_parser = subparsers.add_parser(
        "get",
        help="Get an object from a bucket and save it to a local directory",
    )
    get_parser.add_argument("bucket", help="Bucket name")
    get_parser.add_argument("key", help="Object name")
    get_parser.add_argument("out_dir", metavar="out-dir", help="Directory to write the object to")
    get_parser.add_argument(
        "--checksum",
        required=True,
        metavar="HEX",
        help="Expected checksum, as printed by put",
    )

    list_parser = subparsers.add_parser("list", help="List objects in a bucket")
    list_parser.add_argument("bucket", help="Bucket name")

    delete_parser = subparsers.add_parser("delete", help="Delete an object")
    delete_parser.add_argument("bucket", help="Bucket name")
    delete_parser.add_argument("key", help="Object name")

    exists_parser = subparsers.add_parser("exists", help="Check whether an object exists")
    exists_parser.add_argument("bucket", help="Bucket name")
    exists_parser.add_argument("key", help="Object name")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Storage, configuration or filesystem error
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(config_file=args.config, data_dir=args.data_dir)
    except ConfigError as e:
        _error(str(e))
        return 1

    container = Container.create(config)

    try:
        return COMMANDS[args.command](args, container.storage)
    except (StorageError, OSError) as e:
        container.logger.debug("command_failed", command=args.command, error=str(e))
        _error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
