"""Command-line interface for cloudcontext.

Provides two commands:
- spec: show the resolved context spec for a provider
- sign: print a presigned share URL for a resource path
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box

from cloudcontext.config import build_config
from cloudcontext.errors import CloudContextError, ConfigurationError
from cloudcontext.factory import ContextFactory
from cloudcontext.log import SIGNATURE_LOGGER_NAME, configure_logging
from cloudcontext.models import ContextSpec
from cloudcontext.signing import PresignedUrlSigner, expiring_clock

logger = logging.getLogger("cloudcontext.cli")


def parse_define(value: str) -> tuple[str, str]:
    """Parse a ``key=value`` override."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{value}'")
    return key.strip(), val


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c", "--config",
        metavar="PATH",
        help="JSON file with <provider>.<setting> overrides",
    )
    common.add_argument(
        "-D", "--define",
        metavar="KEY=VALUE",
        action="append",
        type=parse_define,
        default=[],
        help="Override a single setting (repeatable)",
    )
    common.add_argument("--identity", help="Identity used when not configured")
    common.add_argument("--credential", help="Credential used when not configured")
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser = argparse.ArgumentParser(
        prog="cloudcontext",
        description="Resolve provider contexts and sign share URLs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    spec_parser = subparsers.add_parser(
        "spec", parents=[common], help="Show the resolved context spec"
    )
    spec_parser.add_argument("provider", help="Provider name (e.g. s3, atmos)")

    sign_parser = subparsers.add_parser(
        "sign", parents=[common], help="Print a presigned share URL"
    )
    sign_parser.add_argument("provider", help="Provider name (e.g. atmos)")
    sign_parser.add_argument("path", help="Resource path below /rest/namespace/")
    sign_parser.add_argument(
        "--ttl",
        type=int,
        default=3600,
        help="Seconds until the URL expires (default: 3600)",
    )
    sign_parser.add_argument(
        "--skew",
        type=int,
        default=0,
        help="Clock skew correction in seconds (default: 0)",
    )

    return parser.parse_args(argv)


def _type_name(value) -> str:
    if value is None:
        return "-"
    return f"{value.__module__}.{value.__qualname__}"


def render_spec(spec: ContextSpec, console: Console) -> None:
    """Print a ContextSpec as a table. The credential is masked."""
    table = Table(title=f"Context spec: {spec.provider}", box=box.SIMPLE)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("provider", spec.provider)
    table.add_row("endpoint", spec.endpoint or "-")
    table.add_row("api version", spec.api_version or "-")
    table.add_row("identity", spec.identity or "-")
    table.add_row("credential", "***" if spec.credential else "-")
    table.add_row("sync type", _type_name(spec.sync_type))
    table.add_row("async type", _type_name(spec.async_type))
    table.add_row("properties builder", _type_name(spec.properties_builder_type))
    table.add_row("context builder", _type_name(spec.context_builder_type))

    console.print(table)


def build_signer(spec: ContextSpec, ttl: int, skew: int = 0) -> PresignedUrlSigner:
    """Create a signer from a resolved spec.

    Raises:
        ConfigurationError: If the spec lacks an endpoint, identity or
                            credential.
    """
    missing = [
        name
        for name, value in (
            ("endpoint", spec.endpoint),
            ("identity", spec.identity),
            ("credential", spec.credential),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Cannot sign for provider '{spec.provider}': missing {', '.join(missing)}"
        )

    return PresignedUrlSigner.from_credential(
        spec.identity,
        spec.credential,
        spec.endpoint,
        clock=expiring_clock(ttl, skew),
        logger=logger,
        signature_logger=logging.getLogger(SIGNATURE_LOGGER_NAME),
    )


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        console: Rich console for output (defaults to stdout)

    Returns:
        Exit code: 0 for success, 2 for errors
    """
    args = parse_args(argv)
    configure_logging(args.verbose)
    console = console or Console(legacy_windows=True)

    try:
        config = build_config(overrides=dict(args.define), config_path=args.config)
        factory = ContextFactory(config=config, logger=logger)
        spec = factory.create_context_spec(args.provider, args.identity, args.credential)

        if args.command == "spec":
            render_spec(spec, console)
        else:
            signer = build_signer(spec, args.ttl, args.skew)
            console.print(
                str(signer.sign(args.path)),
                soft_wrap=True,
                highlight=False,
                markup=False,
                emoji=False,
            )
    except CloudContextError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
