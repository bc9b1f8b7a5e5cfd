#!/usr/bin/env python3
"""
timehunt — find and rewrite your Google Calendar events from the terminal

Commands:
  setup   OAuth + timezone + calendar selection
  status  Show config summary
  list    List upcoming events matching a name, grouped by day
  fix     Replace every event called OLD with one NEW event over RANGE

Examples:
  timehunt list "Interview"
  timehunt fix "2024-06-01T10:00~2024-06-01T11:00" "Interview (fixed)" "Interview"
"""

import argparse
import logging
import sys
from datetime import datetime, timezone

from date_range import ParseError
from display import LOCALES, DisplayConfig, format_buckets
from event_groups import group_events_by_date
from fix import TerminalPrompt, fix_events
from gcal import AuthorizationError, CalendarError, GoogleSession, build_service, \
    get_credentials, retry_on_auth
from settings import CONFIG_FILE, detect_timezone, load_config, resolve_timezone, save_config

logger = logging.getLogger(__name__)

LIST_WARN_THRESHOLD = 10


def list_events(gateway, name: str, display_config: DisplayConfig, tz) -> int:
    events = gateway.get_events(name)
    if not events:
        print("No upcoming events found.")
        return 0
    print("Upcoming events:")
    for line in format_buckets(group_events_by_date(events, tz), display_config, tz):
        print(line)
    if len(events) > LIST_WARN_THRESHOLD:
        print(f"The number of events exceeds {LIST_WARN_THRESHOLD}.")
    return len(events)


def session_for(config: dict) -> GoogleSession:
    return GoogleSession(config.get("calendar_id", "primary"), resolve_timezone(config))


def fail(message: str):
    print(f"ERROR: {message}")
    sys.exit(1)


# ─── Commands ─────────────────────────────────────────────────────────────────

def cmd_setup(_args):
    print("🗓️  timehunt — Setup")
    print("=" * 45)

    creds = get_credentials()
    if creds is None:
        sys.exit(1)
    service = build_service(creds)
    print("✅ Google Calendar authenticated\n")

    tz = detect_timezone()
    print(f"✅ Detected timezone: {tz}")
    tz_override = input("   Press Enter to accept, or type a different IANA timezone: ").strip()
    if tz_override:
        tz = tz_override
    print()

    calendars = service.calendarList().list().execute().get("items", [])
    for i, cal in enumerate(calendars, 1):
        marker = " (primary)" if cal.get("primary") else ""
        print(f"  {i:2}. {cal['summary']}{marker}")

    try:
        raw = input(f"\nChoose [1-{len(calendars)}] (Enter = primary): ").strip()
        idx = int(raw) - 1 if raw else None
    except (ValueError, KeyboardInterrupt):
        print("\nCancelled.")
        sys.exit(1)

    if idx is None:
        calendar_id, calendar_name = "primary", "primary"
    elif 0 <= idx < len(calendars):
        calendar_id   = calendars[idx]["id"]
        calendar_name = calendars[idx]["summary"]
    else:
        print("Invalid choice.")
        sys.exit(1)
    print(f"\n✅ Using '{calendar_name}'")

    config = load_config()
    config.update({
        "calendar_id":   calendar_id,
        "calendar_name": calendar_name,
        "timezone":      tz,
        "setup_at":      datetime.now(timezone.utc).isoformat(),
    })
    config.setdefault("locale", "ja")
    config.setdefault("business_hours", {"start": "09:00", "end": "19:00"})
    save_config(config)
    print(f"💾 Config saved to {CONFIG_FILE}")


def cmd_status(_args):
    config = load_config()
    if not config.get("calendar_id"):
        print("NOT SET UP — run: timehunt setup")
        sys.exit(1)
    hours = config.get("business_hours", {})
    print("✅  timehunt — ready")
    print(f"   Calendar : {config.get('calendar_name', '?')}  ({config['calendar_id']})")
    print(f"   Timezone : {config.get('timezone', 'local')}")
    print(f"   Locale   : {config.get('locale', 'ja')}")
    print(f"   Day      : {hours.get('start', '09:00')}–{hours.get('end', '19:00')}")
    print(f"   Set up   : {config.get('setup_at', '?')[:10]}")


def cmd_list(args):
    config  = load_config()
    session = session_for(config)
    display = DisplayConfig.from_config(config)
    try:
        retry_on_auth(lambda: list_events(session.gateway(), args.name, display, session.tz),
                      session.reauthenticate)
    except AuthorizationError as e:
        fail(f"Google rejected the credentials: {e}")
    except CalendarError as e:
        fail(str(e))


def cmd_fix(args):
    config  = load_config()
    session = session_for(config)
    try:
        fix_events(
            args.range, args.new_name, args.old_name,
            connect=session.gateway,
            reauthenticate=session.reauthenticate,
            prompt=TerminalPrompt(),
            display_config=DisplayConfig.from_config(config),
            tz=session.tz,
        )
    except ParseError as e:
        fail(str(e))
    except AuthorizationError as e:
        fail(f"Google rejected the credentials: {e}")
    except CalendarError as e:
        fail(str(e))
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")


# ─── CLI ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timehunt", description="Find and rewrite Google Calendar events")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub    = parser.add_subparsers(dest="command")

    sub.add_parser("setup",  help="OAuth + timezone + calendar setup")
    sub.add_parser("status", help="Show config summary")

    li = sub.add_parser("list", help="List upcoming events matching a name")
    li.add_argument("name", help="Event name (full-text match)")

    fx = sub.add_parser("fix", help="Replace events called OLD_NAME with one NEW_NAME event")
    fx.add_argument("range",    help="START~END, e.g. 2024-06-01T10:00~2024-06-01T11:00 or 2024-06-01~2024-06-02")
    fx.add_argument("new_name", help="Name of the event to create")
    fx.add_argument("old_name", help="Name of the events to replace")

    locales = ", ".join(sorted(LOCALES))
    parser.epilog = f"Display locales: {locales} (set \"locale\" in {CONFIG_FILE})"
    return parser


def main(argv=None):
    parser = build_parser()
    args   = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    dispatch = {
        "setup":  cmd_setup,
        "status": cmd_status,
        "list":   cmd_list,
        "fix":    cmd_fix,
    }
    logger.debug("command: %s", args.command)
    fn = dispatch.get(args.command)
    if fn:
        fn(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
