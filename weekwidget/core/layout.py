"""Week grid layout.

`layout_week` turns a week window, the dataset's events and tasks, and the
current time into everything the painter needs: day columns, positioned event
blocks, the current-time marker and the task rows. Positions are fractions of
a day so the widget can scale them to whatever hour height it uses.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

from weekwidget.core.config import MIN_EVENT_MINUTES
from weekwidget.core.models import Event, Task
from weekwidget.core.utils import format_due, start_of_day
from weekwidget.core.week import WeekWindow

MINUTES_PER_DAY = 24 * 60


@dataclass
class DayColumn:
    day: date
    label: str
    is_today: bool
    all_day: List[Event] = field(default_factory=list)


@dataclass
class EventBlock:
    event: Event
    day_index: int
    top: float
    height: float
    column: int = 0
    columns: int = 1
    continues_before: bool = False
    continues_after: bool = False


@dataclass
class NowMarker:
    day_index: int
    position: float


@dataclass
class TaskRow:
    task: Task
    due_label: str
    overdue: bool


@dataclass
class WeekLayout:
    window: WeekWindow
    title: str
    week_number: int
    days: List[DayColumn]
    blocks: List[EventBlock]
    now: Optional[NowMarker]
    tasks: List[TaskRow]

    @property
    def all_day_rows(self):
        return max((len(d.all_day) for d in self.days), default=0)


def week_title(window: WeekWindow) -> str:
    """'Week 42 · October 2026', or 'Week 44 · Oct – Nov 2026' across months."""
    first, last = window.start, window.end - timedelta(days=1)
    if first.month == last.month:
        span = first.strftime('%B %Y')
    elif first.year == last.year:
        span = f"{first.strftime('%b')} – {last.strftime('%b %Y')}"
    else:
        span = f"{first.strftime('%b %Y')} – {last.strftime('%b %Y')}"
    return f"Week {window.iso_week} · {span}"


def _minutes_since(day_start: datetime, moment: datetime) -> float:
    """Wall-clock minutes from `day_start` to `moment`, both in the display timezone."""
    return (moment.replace(tzinfo=None) - day_start.replace(tzinfo=None)).total_seconds() / 60


def _split_timed_event(event, window, tz):
    """Yield one block per displayed day the event touches."""
    start = event.start.astimezone(tz)
    end = max(event.end.astimezone(tz), start)

    for index, day in enumerate(window.days()):
        day_start = start_of_day(day, tz)
        day_end = start_of_day(day + timedelta(days=1), tz)
        if start >= day_end or (end <= day_start and not (start == end == day_start)):
            continue

        seg_start = max(start, day_start)
        seg_end = min(end, day_end)
        top = _minutes_since(day_start, seg_start)
        length = max(_minutes_since(seg_start, seg_end), MIN_EVENT_MINUTES)
        top = min(top, MINUTES_PER_DAY - length)

        yield EventBlock(
            event=event,
            day_index=index,
            top=top / MINUTES_PER_DAY,
            height=length / MINUTES_PER_DAY,
            continues_before=start < day_start,
            continues_after=end > day_end,
        )


def _span(block):
    """Block extent in whole-ish minutes, so touching events compare equal."""
    start = round(block.top * MINUTES_PER_DAY, 3)
    return start, round((block.top + block.height) * MINUTES_PER_DAY, 3)


def _assign_columns(blocks):
    """Place overlapping blocks of one day side by side."""
    blocks.sort(key=lambda b: (b.top, -b.height, b.event.title))
    cluster, cluster_end, lanes = [], 0.0, []

    def close_cluster():
        for block in cluster:
            block.columns = len(lanes)

    for block in blocks:
        start, end = _span(block)
        if cluster and start >= cluster_end:
            close_cluster()
            cluster, cluster_end, lanes = [], 0.0, []

        for lane, lane_end in enumerate(lanes):
            if lane_end <= start:
                block.column = lane
                lanes[lane] = end
                break
        else:
            block.column = len(lanes)
            lanes.append(end)

        cluster.append(block)
        cluster_end = max(cluster_end, end)

    if cluster:
        close_cluster()


def _task_rows(tasks, today):
    def sort_key(task):
        return (task.completed, task.due is None, task.due or date.max, task.title.lower())

    return [
        TaskRow(
            task=task,
            due_label=format_due(task.due, today),
            overdue=bool(task.due and task.due < today and not task.completed),
        )
        for task in sorted(tasks, key=sort_key)
    ]


def layout_week(window: WeekWindow, events, tasks, now: datetime, tz=None) -> WeekLayout:
    """Lay out one week.

    `now` must be aware. Blocks are placed on the wall clock of `tz`, or of
    the system's local time when `tz` is None, so each day gets its own UTC
    offset across a DST change.
    """
    now = now.astimezone(tz)
    today = now.date()

    days = [
        DayColumn(day=day, label=day.strftime('%a %d'), is_today=(day == today))
        for day in window.days()
    ]

    blocks_by_day = {i: [] for i in range(7)}
    for event in sorted(events, key=lambda e: e.sort_key()):
        if event.all_day:
            last_day = max(event.end - timedelta(days=1), event.start)
            for column in days:
                if event.start <= column.day <= last_day:
                    column.all_day.append(event)
        else:
            for block in _split_timed_event(event, window, tz):
                blocks_by_day[block.day_index].append(block)

    blocks = []
    for index in range(7):
        _assign_columns(blocks_by_day[index])
        blocks.extend(blocks_by_day[index])

    marker = None
    if window.contains(today):
        day_index = (today - window.start).days
        position = _minutes_since(start_of_day(today, tz), now) / MINUTES_PER_DAY
        marker = NowMarker(day_index=day_index, position=min(max(position, 0.0), 1.0))

    return WeekLayout(
        window=window,
        title=week_title(window),
        week_number=window.iso_week,
        days=days,
        blocks=blocks,
        now=marker,
        tasks=_task_rows(tasks, today),
    )
