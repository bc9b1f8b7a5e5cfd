"""
The "fix" workflow: replace every event called OLD with one event called NEW.

    fetch OLD events -> show them -> parse range -> overlap? -> confirm
        -> delete all OLD -> create NEW

Nothing is changed on the calendar until the user answers yes. When Google
rejects the credentials the whole workflow starts again after
re-authenticating, a bounded number of times.
"""

import enum
import logging
from datetime import tzinfo

from date_range import parse_range
from display import DisplayConfig, format_buckets
from event_groups import group_events_by_date, is_in_range
from gcal import MAX_AUTH_ATTEMPTS, retry_on_auth

logger = logging.getLogger(__name__)

YES = ("y", "yes")
NO  = ("n", "no")


class FixOutcome(enum.Enum):
    DONE      = "done"
    ABORTED   = "aborted"
    NOT_FOUND = "not_found"


class TerminalPrompt:
    def ask(self, question: str) -> str:
        return input(question)


def ask_yes_no(prompt, question: str) -> bool:
    """Ask until the answer is y/yes/n/no (any case). True means yes."""
    while True:
        answer = prompt.ask(question).strip().lower()
        if answer in YES:
            return True
        if answer in NO:
            return False


def fix_once(gateway, date_range_expr: str, after_name: str, before_name: str,
             prompt, display_config: DisplayConfig, tz: tzinfo) -> FixOutcome:
    before_events = gateway.get_events(before_name)
    if not before_events:
        print("No upcoming events found.")
        return FixOutcome.NOT_FOUND

    for line in format_buckets(group_events_by_date(before_events, tz), display_config, tz):
        print(line)

    date_range = parse_range(date_range_expr, tz)
    if not is_in_range(date_range, before_events, tz):
        print(f'Could not find schedule in "{before_name}" events.')
        return FixOutcome.NOT_FOUND

    print("Are you sure to remove schedules?")
    if not ask_yes_no(prompt, f"And add this?\n{date_range_expr}\n(y/n) > "):
        print("Cancelled.")
        return FixOutcome.ABORTED

    # All events under the old name go, not only the overlapping ones.
    gateway.delete_events(before_name)
    gateway.create_event(after_name, date_range)
    print(f"✅ Replaced {len(before_events)} \"{before_name}\" event(s) with \"{after_name}\" ({date_range})")
    return FixOutcome.DONE


def fix_events(date_range_expr: str, after_name: str, before_name: str, *,
               connect, reauthenticate, prompt, display_config: DisplayConfig,
               tz: tzinfo, max_attempts: int = MAX_AUTH_ATTEMPTS) -> FixOutcome:
    """Run the fix workflow, restarting from the fetch on authorization failure.

    ``connect`` returns a fresh gateway for each attempt; ``reauthenticate``
    re-acquires credentials between attempts. ParseError and TransportError
    propagate without a retry.
    """
    def attempt():
        return fix_once(connect(), date_range_expr, after_name, before_name,
                        prompt, display_config, tz)

    outcome = retry_on_auth(attempt, reauthenticate, max_attempts)
    logger.info("fix %r -> %r finished: %s", before_name, after_name, outcome.value)
    return outcome
