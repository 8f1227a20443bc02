from datetime import date, datetime, time, timedelta, timezone


def start_of_day(day, tz=None):
    """Aware datetime for midnight at the start of `day`.

    With no `tz` this is the system's local midnight, with the UTC offset in
    force on that day rather than today's.
    """
    midnight = datetime.combine(day, time.min)
    if tz is None:
        return midnight.astimezone()
    return midnight.replace(tzinfo=tz)


def format_iso_for_api(dt):
    """Format datetime as ISO format for Google API."""
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def parse_iso_from_api(iso_str):
    """Parse ISO datetime string from Google API."""
    return datetime.fromisoformat(iso_str.replace('Z', '+00:00'))


def parse_api_date(value):
    """Parse a Google date or RFC 3339 timestamp down to its calendar date.

    Tasks report due dates as midnight UTC timestamps; only the date part is
    meaningful.
    """
    if not value:
        return None
    return date.fromisoformat(value[:10])


def format_time(dt):
    """Format time as 24-hour HH:MM."""
    return dt.strftime('%H:%M')


def format_time_range(event, tz=None):
    """Human readable time span of an event, 'All day' for all-day events."""
    if event.all_day:
        last_day = event.end - timedelta(days=1)
        if last_day > event.start:
            return f"All day, {event.start.strftime('%d %b')} - {last_day.strftime('%d %b')}"
        return "All day"
    start = event.start.astimezone(tz)
    end = event.end.astimezone(tz)
    if start.date() == end.date():
        return f"{format_time(start)} - {format_time(end)}"
    return f"{format_time(start)} - {end.strftime('%a %d %b')} {format_time(end)}"


def format_date_long(day):
    """Format a date as e.g. 'Monday, 19. October'."""
    return day.strftime('%A, %d. %B')


def format_due(due, today):
    """Short label for a task due date relative to today."""
    if due is None:
        return ''
    delta = (due - today).days
    if delta == 0:
        return 'Today'
    if delta == 1:
        return 'Tomorrow'
    if delta == -1:
        return 'Yesterday'
    if due.year == today.year:
        return due.strftime('%d %b')
    return due.strftime('%d %b %Y')
