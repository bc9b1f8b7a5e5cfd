"""
Google Calendar access: OAuth credentials, the calendar gateway and
the authorization-retry helper used by the commands.

Every API failure leaving this module is a CalendarError:
AuthorizationError when Google rejected the credentials (worth
re-authenticating), TransportError for everything else.
"""

import logging
from datetime import datetime, tzinfo

import httplib2
from google.auth.exceptions import RefreshError
from google.auth.exceptions import TransportError as GoogleTransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from date_range import DateTimeRange
from event_groups import CalendarEvent
from settings import CRED_CANDIDATES, SCOPES, TOKEN_FILE, find_credentials

logger = logging.getLogger(__name__)

MAX_AUTH_ATTEMPTS = 3


class CalendarError(Exception):
    """Base class for failures talking to Google Calendar."""


class AuthorizationError(CalendarError):
    """Google rejected our credentials."""


class TransportError(CalendarError):
    """Network or service failure unrelated to authorization."""


# ─── Credentials ──────────────────────────────────────────────────────────────

def save_token(creds: Credentials, path=None):
    path = path or TOKEN_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(creds.to_json())


def get_credentials_from_json(path):
    """Load cached credentials, or None if the cache is missing or malformed."""
    try:
        return Credentials.from_authorized_user_file(str(path), SCOPES)
    except (ValueError, OSError) as e:
        logger.warning("Ignoring unreadable token cache %s: %s", path, e)
        return None


def get_credentials():
    """Run the browser OAuth flow and cache the resulting token."""
    creds_file = find_credentials()
    if not creds_file:
        print("ERROR: No credentials.json found. Place it at:")
        for p in CRED_CANDIDATES:
            print(f"  {p}")
        return None
    flow  = InstalledAppFlow.from_client_secrets_file(str(creds_file), SCOPES)
    creds = flow.run_local_server(port=0)
    save_token(creds)
    print(f"Token has been issued: {TOKEN_FILE}")
    return creds


def load_credentials():
    creds = get_credentials_from_json(TOKEN_FILE) if TOKEN_FILE.exists() else None
    if creds and not creds.valid and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            save_token(creds)
        except RefreshError as e:
            logger.warning("Token refresh failed: %s", e)
            creds = None
    if not creds or not creds.valid:
        creds = get_credentials()
    return creds


def build_service(creds: Credentials):
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


# ─── Gateway ──────────────────────────────────────────────────────────────────

def execute(request, action: str):
    """Run an API request, translating failures into CalendarError."""
    try:
        return request.execute()
    except HttpError as e:
        if e.resp.status == 401:
            raise AuthorizationError(f"{action}: credentials rejected ({e.resp.status})") from e
        raise TransportError(f"{action}: Google Calendar API error {e.resp.status}") from e
    except RefreshError as e:
        raise AuthorizationError(f"{action}: could not refresh token: {e}") from e
    except (GoogleTransportError, httplib2.HttpLib2Error, OSError) as e:
        raise TransportError(f"{action}: {e}") from e


class CalendarGateway:
    """The three calendar operations timehunt needs, on one calendar."""

    def __init__(self, service, calendar_id: str, tz: tzinfo):
        self.service     = service
        self.calendar_id = calendar_id
        self.tz          = tz

    def get_events(self, name: str) -> list:
        """Events from today onwards whose text matches ``name``."""
        time_min = datetime.now(self.tz).replace(hour=0, minute=0, second=0, microsecond=0)
        events, page_token = [], None
        while True:
            result = execute(self.service.events().list(
                calendarId=self.calendar_id,
                q=name,
                singleEvents=True,
                orderBy="startTime",
                timeMin=time_min.isoformat(),
                pageToken=page_token,
            ), "list events")
            events.extend(CalendarEvent.from_api(item) for item in result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                break
        logger.debug("Found %d event(s) matching %r", len(events), name)
        return events

    def delete_events(self, name: str):
        for event in self.get_events(name):
            logger.debug("Deleting %s (%s)", event.name, event.event_id)
            execute(self.service.events().delete(
                calendarId=self.calendar_id,
                eventId=event.event_id,
            ), "delete event")

    def create_event(self, name: str, date_range: DateTimeRange) -> dict:
        if date_range.all_day:
            start = {"date": date_range.start.date().isoformat()}
            end   = {"date": date_range.end.date().isoformat()}
        else:
            start = {"dateTime": date_range.start.isoformat()}
            end   = {"dateTime": date_range.end.isoformat()}
            tz_name = getattr(self.tz, "key", None)
            if tz_name:
                start["timeZone"] = end["timeZone"] = tz_name
        logger.debug("Creating %r %s", name, date_range)
        return execute(self.service.events().insert(
            calendarId=self.calendar_id,
            body={"summary": name, "start": start, "end": end},
        ), "create event")


class GoogleSession:
    """Hands out gateways, re-running OAuth on demand."""

    def __init__(self, calendar_id: str, tz: tzinfo):
        self.calendar_id = calendar_id
        self.tz          = tz
        self.credentials = None

    def gateway(self) -> CalendarGateway:
        if self.credentials is None:
            self.credentials = load_credentials()
        if self.credentials is None:
            raise AuthorizationError("No usable Google credentials")
        return CalendarGateway(build_service(self.credentials), self.calendar_id, self.tz)

    def reauthenticate(self):
        self.credentials = get_credentials()


def retry_on_auth(action, reauthenticate, attempts: int = MAX_AUTH_ATTEMPTS):
    """Call ``action()``; on AuthorizationError re-authenticate and start over.

    Gives up after ``attempts`` tries by re-raising the last AuthorizationError.
    Other errors propagate immediately.
    """
    for attempt in range(1, attempts + 1):
        try:
            return action()
        except AuthorizationError as e:
            if attempt == attempts:
                logger.error("Authorization failed %d time(s), giving up: %s", attempt, e)
                raise
            logger.warning("Authorization failed (attempt %d/%d): %s", attempt, attempts, e)
            reauthenticate()
