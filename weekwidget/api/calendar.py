import datetime
import logging
from weekwidget.api.base import GoogleApiManager
from weekwidget.core.config import API_MAX_RESULTS, DEFAULT_EVENT_COLOR
from weekwidget.core.errors import ApiError, AuthError, NetworkError, RateLimitError
from weekwidget.core.models import Event
from weekwidget.core.utils import format_iso_for_api, parse_iso_from_api

logger = logging.getLogger(__name__)


class CalendarManager(GoogleApiManager):
    """Reads events from every calendar in the user's calendar list."""

    service_name = 'calendar'
    service_version = 'v3'

    def fetch_calendars(self):
        """Return the calendar list entries (id, summary, colour, primary flag)."""
        items = self._list_all(
            lambda service, **page: service.calendarList().list(**page),
            API_MAX_RESULTS,
        )
        return [
            {
                'id': item['id'],
                'name': item.get('summaryOverride') or item.get('summary') or 'Unnamed',
                'color': item.get('backgroundColor') or DEFAULT_EVENT_COLOR,
                'primary': item.get('primary', False),
            }
            for item in items
            if item.get('id')
        ]

    def fetch_calendar_events(self, calendar, time_min, time_max):
        """Fetch all events of one calendar overlapping [time_min, time_max)."""
        params = {
            'calendarId': calendar['id'],
            'timeMin': format_iso_for_api(time_min),
            'timeMax': format_iso_for_api(time_max),
            'singleEvents': True,
            'orderBy': 'startTime',
        }
        items = self._list_all(
            lambda service, **page: service.events().list(**params, **page),
            API_MAX_RESULTS,
        )

        events = []
        for item in items:
            event = parse_event(item, calendar)
            if event is not None:
                events.append(event)
        return events

    def fetch_events(self, time_min, time_max):
        """Fetch events across all calendars, sorted by day, all-day first, then time.

        A calendar whose events cannot be read is skipped. Auth, rate limit and
        network failures abort the whole fetch.
        """
        events = []
        for calendar in self.fetch_calendars():
            try:
                events.extend(self.fetch_calendar_events(calendar, time_min, time_max))
            except (AuthError, RateLimitError, NetworkError):
                raise
            except ApiError as e:
                logger.warning("Skipping calendar %s: %s", calendar['name'], e)

        events.sort(key=lambda e: e.sort_key())
        logger.info("Fetched %d events between %s and %s", len(events), time_min, time_max)
        return events


def parse_event(item, calendar):
    """Convert a Calendar API event resource into an Event, or None if unusable."""
    if item.get('status') == 'cancelled':
        return None

    start = item.get('start', {})
    end = item.get('end', {})
    try:
        if 'date' in start:
            start_value = datetime.date.fromisoformat(start['date'])
            end_value = (datetime.date.fromisoformat(end['date']) if 'date' in end
                         else start_value + datetime.timedelta(days=1))
            all_day = True
        elif 'dateTime' in start:
            start_value = parse_iso_from_api(start['dateTime'])
            end_value = parse_iso_from_api(end['dateTime']) if 'dateTime' in end else start_value
            all_day = False
        else:
            logger.debug("Event %s has no start, skipping", item.get('id'))
            return None
    except ValueError as e:
        logger.warning("Event %s has an unparseable time: %s", item.get('id'), e)
        return None

    return Event(
        event_id=item.get('id', ''),
        title=item.get('summary') or '(No title)',
        start=start_value,
        end=end_value,
        all_day=all_day,
        calendar_id=calendar['id'],
        calendar_name=calendar['name'],
        color=calendar['color'],
        location=item.get('location', ''),
        description=item.get('description', ''),
        html_link=item.get('htmlLink', ''),
    )
