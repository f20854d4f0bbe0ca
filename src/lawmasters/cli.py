"""Command-line interface for LawMasters persisted preferences."""

import argparse
import json
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lawmasters import __version__
from lawmasters.config import Settings, StorageBackend, get_settings
from lawmasters.container import Container
from lawmasters.domain.value_objects import Language
from lawmasters.exceptions import ConfigurationError
from lawmasters.logging_config import bind_context, clear_context, configure_logging
from lawmasters.store.persistence import PersistedStatePayload


def _on_off(value: bool) -> str:
    return "on" if value else "off"


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Apply --storage/--backend overrides on top of environment settings."""
    overrides: dict[str, object] = {}
    if getattr(args, "storage", None):
        overrides["storage_path"] = Path(args.storage)
    if getattr(args, "backend", None):
        overrides["storage_backend"] = StorageBackend(args.backend)
    return get_settings().model_copy(update=overrides)


def create_container(args: argparse.Namespace) -> Container:
    return Container(settings_from_args(args))


def cmd_prefs_show(args: argparse.Namespace) -> int:
    """Show persisted preferences."""
    container = create_container(args)
    try:
        state = container.store.state
        if getattr(args, "json", False):
            payload = PersistedStatePayload.from_state(state.persisted)
            print(json.dumps(payload.model_dump(by_alias=True, mode="json"), indent=2))
            return 0

        print("Preferences:")
        print(f"  Dark mode:     {_on_off(state.dark_mode)}")
        print(f"  Language:      {state.language.value}")
        print(f"  BCI safe mode: {_on_off(state.bci_safe_mode)}")
        print(f"  Timezone:      {state.timezone}")
        print(f"  Date format:   {state.date_format}")
        print(f"  Recent matters: {len(state.recent_matters)}")
        print(f"  Pinned items:   {len(state.pinned_items)}")
        return 0
    finally:
        container.close()


def cmd_prefs_set(args: argparse.Namespace) -> int:
    """Update one or more persisted preferences."""
    if args.timezone is not None:
        try:
            ZoneInfo(args.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            print(f"Error: Unknown timezone: {args.timezone}")
            return 1

    if args.date_format is not None and not args.date_format.strip():
        print("Error: Date format cannot be empty")
        return 1

    container = create_container(args)
    try:
        store = container.store
        changed = 0
        if args.language is not None:
            store.set_language(args.language)
            changed += 1
        if args.bci_safe_mode is not None:
            store.set_bci_safe_mode(args.bci_safe_mode == "on")
            changed += 1
        if args.timezone is not None:
            store.set_timezone(args.timezone)
            changed += 1
        if args.date_format is not None:
            store.set_date_format(args.date_format)
            changed += 1

        if changed == 0:
            print("Nothing to update. Pass --language, --bci-safe-mode, --timezone or --date-format.")
            return 1
        print(f"Updated {changed} preference(s)")
        return 0
    finally:
        container.close()


def cmd_dark_mode(args: argparse.Namespace) -> int:
    """Toggle dark mode."""
    container = create_container(args)
    try:
        container.store.toggle_dark_mode()
        print(f"Dark mode: {_on_off(container.store.state.dark_mode)}")
        return 0
    finally:
        container.close()


def cmd_recent_add(args: argparse.Namespace) -> int:
    """Move a matter to the front of the recent matters list."""
    if not args.matter_id.strip():
        print("Error: Matter id cannot be empty")
        return 1
    container = create_container(args)
    try:
        container.store.add_recent_matter(args.matter_id.strip())
        _print_recent(container.store.state.recent_matters)
        return 0
    finally:
        container.close()


def cmd_recent_list(args: argparse.Namespace) -> int:
    """List recent matters, most recent first."""
    container = create_container(args)
    try:
        _print_recent(container.store.state.recent_matters)
        return 0
    finally:
        container.close()


def _print_recent(recent: tuple[str, ...]) -> None:
    if not recent:
        print("No recent matters")
        return
    print("Recent matters:")
    for position, matter_id in enumerate(recent, start=1):
        print(f"  {position:>2}. {matter_id}")


def cmd_pin(args: argparse.Namespace) -> int:
    """Pin an item, or unpin it when already pinned."""
    if not args.item_id.strip():
        print("Error: Item id cannot be empty")
        return 1
    item_id = args.item_id.strip()
    container = create_container(args)
    try:
        store = container.store
        store.toggle_pinned_item(item_id)
        print(f"{'Pinned' if store.is_pinned(item_id) else 'Unpinned'} {item_id}")
        return 0
    finally:
        container.close()


def cmd_pins(args: argparse.Namespace) -> int:
    """List pinned items."""
    container = create_container(args)
    try:
        pinned = sorted(container.store.state.pinned_items)
        if not pinned:
            print("No pinned items")
            return 0
        print("Pinned items:")
        for item_id in pinned:
            print(f"  - {item_id}")
        return 0
    finally:
        container.close()


def cmd_reset(args: argparse.Namespace) -> int:
    """Remove the persisted preferences payload."""
    container = create_container(args)
    try:
        if not container.persister.clear():
            print("Error: Could not remove persisted preferences")
            return 1
        print(f"Removed persisted preferences '{container.persister.key}'")
        return 0
    finally:
        container.close()


def cmd_version(args: argparse.Namespace) -> int:
    """Show version."""
    print(f"lawmasters {__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lawmasters",
        description="LawMasters - dashboard preferences and quick-access lists",
    )
    parser.add_argument(
        "--storage",
        "-s",
        help="Directory holding persisted preferences",
        default=None,
    )
    parser.add_argument(
        "--backend",
        choices=[b.value for b in StorageBackend if b != StorageBackend.MEMORY],
        help="Storage backend (default from LM_STORAGE_BACKEND)",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # prefs command
    prefs_parser = subparsers.add_parser("prefs", help="Show or change preferences")
    prefs_subparsers = prefs_parser.add_subparsers(
        dest="prefs_command", help="Preference commands"
    )

    prefs_show_parser = prefs_subparsers.add_parser("show", help="Show preferences")
    prefs_show_parser.add_argument(
        "--json", action="store_true", help="Print the persisted payload as JSON"
    )
    prefs_show_parser.set_defaults(func=cmd_prefs_show)

    prefs_set_parser = prefs_subparsers.add_parser("set", help="Change preferences")
    prefs_set_parser.add_argument(
        "--language", choices=[lang.value for lang in Language], default=None
    )
    prefs_set_parser.add_argument(
        "--bci-safe-mode", choices=["on", "off"], default=None, dest="bci_safe_mode"
    )
    prefs_set_parser.add_argument("--timezone", default=None, help="IANA zone name")
    prefs_set_parser.add_argument(
        "--date-format", default=None, dest="date_format", help="e.g. dd/MM/yyyy"
    )
    prefs_set_parser.set_defaults(func=cmd_prefs_set)

    # dark-mode command
    dark_parser = subparsers.add_parser("dark-mode", help="Toggle dark mode")
    dark_parser.set_defaults(func=cmd_dark_mode)

    # recent command
    recent_parser = subparsers.add_parser("recent", help="Recent matters")
    recent_subparsers = recent_parser.add_subparsers(
        dest="recent_command", help="Recent matter commands"
    )
    recent_add_parser = recent_subparsers.add_parser("add", help="Record a matter visit")
    recent_add_parser.add_argument("matter_id", help="Matter id")
    recent_add_parser.set_defaults(func=cmd_recent_add)
    recent_list_parser = recent_subparsers.add_parser("list", help="List recent matters")
    recent_list_parser.set_defaults(func=cmd_recent_list)

    # pin / pins commands
    pin_parser = subparsers.add_parser("pin", help="Toggle a pinned item")
    pin_parser.add_argument("item_id", help="Item id")
    pin_parser.set_defaults(func=cmd_pin)

    pins_parser = subparsers.add_parser("pins", help="List pinned items")
    pins_parser.set_defaults(func=cmd_pins)

    # reset command
    reset_parser = subparsers.add_parser("reset", help="Forget persisted preferences")
    reset_parser.set_defaults(func=cmd_reset)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "prefs" and (
        not hasattr(args, "prefs_command") or args.prefs_command is None
    ):
        prefs_parser.print_help()
        return 0

    if args.command == "recent" and (
        not hasattr(args, "recent_command") or args.recent_command is None
    ):
        recent_parser.print_help()
        return 0

    configure_logging(settings_from_args(args))
    bind_context(command=args.command)

    try:
        result: int = args.func(args)
    except ConfigurationError as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        clear_context()
    return result


if __name__ == "__main__":
    sys.exit(main())
