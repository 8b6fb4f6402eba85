"""
Command-line interface for the Role-Grant Ritual Kit.

Provides three tools, one per document family:

- ritual-ledger: inspect the ceremonial ledger
- ritual-badge:  manage badges and affix them to members
- ritual-role:   grant catalog roles with full ceremony

Usage:
    ritual-ledger init
    ritual-ledger stats
    ritual-ledger recent [LIMIT]

    ritual-badge init
    ritual-badge list
    ritual-badge affix USER_ID BADGE_NAME GRANTED_BY [CEREMONY]
    ritual-badge user USER_ID

    ritual-role init
    ritual-role list
    ritual-role grant GUILD_ID USER_ID ROLE_NAME GRANTED_BY [BADGE] [CHANNEL]
    ritual-role stats

Every command exits 0 on success and 1 on a usage error or a reported
failure (missing configuration, unknown badge or role, unreadable document).

Environment Variables:
    DISCORD_TOKEN: Bot token; without it ritual-role runs offline
    RITUAL_*:      Path, shrine and logging overrides (see ritual_kit.config)
"""

import argparse
import sys
from collections.abc import Callable, Sequence

from ritual_kit import __version__
from ritual_kit.config import configure_logging
from ritual_kit.context import RitualContext, open_context
from ritual_kit.errors import RitualError
from ritual_kit.formatting import (
    ceremonial_banner,
    format_badge_list,
    format_recent,
    format_role_list,
    format_statistics,
    format_user_badges,
)
from ritual_kit.roles import RoleGranter


class KitArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _report(exc: RitualError) -> int:
    print(f"Error: {exc}", file=sys.stderr)
    return 1


def _print_statistics(ctx: RitualContext) -> int:
    stats = ctx.ledger.statistics_snapshot()
    if stats is None:
        print("No ledger data available", file=sys.stderr)
        return 1
    print(format_statistics(stats))
    return 0


# ============================================================================
# LEDGER COMMANDS
# ============================================================================


def cmd_ledger_init(args: argparse.Namespace) -> int:
    """Create the ledger if it does not exist yet."""
    try:
        with open_context(connect=False) as ctx:
            ctx.ledger.initialize()
            print("✨ Ceremonial Ledger ready for use")
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_ledger_stats(args: argparse.Namespace) -> int:
    """Print ledger counters and shrine metadata."""
    try:
        with open_context(connect=False) as ctx:
            return _print_statistics(ctx)
    except RitualError as exc:
        return _report(exc)


def cmd_ledger_recent(args: argparse.Namespace) -> int:
    """Print the most recent ledger entries, newest first."""
    try:
        with open_context(connect=False) as ctx:
            print(format_recent(ctx.ledger.read_recent(args.limit)))
        return 0
    except RitualError as exc:
        return _report(exc)


# ============================================================================
# BADGE COMMANDS
# ============================================================================


def cmd_badge_init(args: argparse.Namespace) -> int:
    """Create the badge directory and seed the templates."""
    try:
        with open_context(connect=False) as ctx:
            ctx.badges.initialize()
            print("✨ Badge Affixer initialized")
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_badge_list(args: argparse.Namespace) -> int:
    """List every badge with its grant count."""
    try:
        with open_context(connect=False) as ctx:
            ctx.badges.initialize()
            print(format_badge_list(ctx.badges.list_badges()))
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_badge_affix(args: argparse.Namespace) -> int:
    """Affix a badge to a member and record it in the ledger."""
    try:
        with open_context(connect=False) as ctx:
            ctx.badges.initialize()
            if not ctx.badges.affix_badge(
                args.user_id, args.badge_name, args.granted_by, args.ceremony
            ):
                print("Error: badge affixed but the ledger could not be updated.", file=sys.stderr)
                return 1
            badge = ctx.badges.get_badge(args.badge_name)
        print(f"🏆 Badge '{badge.title or badge.name}' affixed to user {args.user_id}")
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_badge_user(args: argparse.Namespace) -> int:
    """Show every badge a member holds."""
    try:
        with open_context(connect=False) as ctx:
            ctx.badges.initialize()
            print(format_user_badges(args.user_id, ctx.badges.badges_for_user(args.user_id)))
        return 0
    except RitualError as exc:
        return _report(exc)


# ============================================================================
# ROLE COMMANDS
# ============================================================================


def cmd_role_init(args: argparse.Namespace) -> int:
    """Connect to Discord (when configured) and prepare ledger and badges."""
    print(ceremonial_banner("ROLE-GRANT RITUAL KIT"))
    try:
        with open_context() as ctx:
            if ctx.online:
                print(f"✨ Connected to Discord as {ctx.discord.user_tag}")
            else:
                print("⚠️  No Discord connection, running in offline mode")
            ctx.ledger.initialize()
            ctx.badges.initialize()
            print("✨ Role Granter ready for ceremonies")
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_role_list(args: argparse.Namespace) -> int:
    """List the roles declared in the catalog."""
    try:
        with open_context(connect=False) as ctx:
            print(format_role_list(RoleGranter(ctx).list_roles()))
        return 0
    except RitualError as exc:
        return _report(exc)


def cmd_role_grant(args: argparse.Namespace) -> int:
    """Grant a catalog role with full ceremony."""
    try:
        with open_context() as ctx:
            outcome = RoleGranter(ctx).grant_role(
                args.guild_id,
                args.user_id,
                args.role_name,
                args.granted_by,
                badge=args.badge,
                announce_channel=args.channel,
            )
    except RitualError as exc:
        return _report(exc)

    if not outcome.success:
        print("Error: role grant could not be recorded in the ledger.", file=sys.stderr)
        return 1
    print(f"✨ {outcome.role.name} granted to {args.user_id}")
    return 0


def cmd_role_stats(args: argparse.Namespace) -> int:
    """Print ledger counters and shrine metadata."""
    try:
        with open_context(connect=False) as ctx:
            return _print_statistics(ctx)
    except RitualError as exc:
        return _report(exc)


# ============================================================================
# PARSERS AND ENTRY POINTS
# ============================================================================


def _base_parser(prog: str, description: str) -> KitArgumentParser:
    parser = KitArgumentParser(prog=prog, description=description)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_ledger_parser() -> KitArgumentParser:
    parser = _base_parser("ritual-ledger", "Ceremonial Ledger - record of every ceremony")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create the ledger").set_defaults(func=cmd_ledger_init)
    subparsers.add_parser("stats", help="Show ceremonial statistics").set_defaults(
        func=cmd_ledger_stats
    )
    recent_parser = subparsers.add_parser("recent", help="Show recent ceremonies")
    recent_parser.add_argument("limit", type=int, nargs="?", default=10)
    recent_parser.set_defaults(func=cmd_ledger_recent)
    return parser


def build_badge_parser() -> KitArgumentParser:
    parser = _base_parser("ritual-badge", "Badge Affixer - ceremonial badges and crests")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Seed badge templates").set_defaults(func=cmd_badge_init)
    subparsers.add_parser("list", help="List available badges").set_defaults(
        func=cmd_badge_list
    )

    affix_parser = subparsers.add_parser("affix", help="Affix a badge to a user")
    affix_parser.add_argument("user_id")
    affix_parser.add_argument("badge_name")
    affix_parser.add_argument("granted_by")
    affix_parser.add_argument("ceremony", nargs="?", default=None)
    affix_parser.set_defaults(func=cmd_badge_affix)

    user_parser = subparsers.add_parser("user", help="Show a user's badges")
    user_parser.add_argument("user_id")
    user_parser.set_defaults(func=cmd_badge_user)
    return parser


def build_role_parser() -> KitArgumentParser:
    parser = _base_parser("ritual-role", "Role-Grant Ritual Kit - ceremonial role granting")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Initialize the ceremonial system").set_defaults(
        func=cmd_role_init
    )
    subparsers.add_parser("list", help="List available roles").set_defaults(func=cmd_role_list)

    grant_parser = subparsers.add_parser("grant", help="Grant a role")
    grant_parser.add_argument("guild_id")
    grant_parser.add_argument("user_id")
    grant_parser.add_argument("role_name")
    grant_parser.add_argument("granted_by")
    grant_parser.add_argument("badge", nargs="?", default=None)
    grant_parser.add_argument("channel", nargs="?", default=None)
    grant_parser.set_defaults(func=cmd_role_grant)

    subparsers.add_parser("stats", help="Display ceremonial statistics").set_defaults(
        func=cmd_role_stats
    )
    return parser


def _dispatch(
    parser: KitArgumentParser,
    argv: Sequence[str] | None,
    banner: str | None = None,
) -> int:
    args = parser.parse_args(argv)
    configure_logging()

    handler: Callable[[argparse.Namespace], int] | None = getattr(args, "func", None)
    if handler is None:
        if banner:
            print(ceremonial_banner(banner))
        parser.print_help()
        return 1
    return handler(args)


def ledger_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``ritual-ledger``."""
    return _dispatch(build_ledger_parser(), argv)


def badge_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``ritual-badge``."""
    return _dispatch(build_badge_parser(), argv)


def role_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``ritual-role``."""
    return _dispatch(build_role_parser(), argv, banner="ROLE-GRANT RITUAL KIT")


if __name__ == "__main__":
    sys.exit(role_main())
