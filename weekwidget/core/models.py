import datetime
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Event:
    """A calendar event. Timed events carry aware datetimes, all-day events dates with an exclusive end."""
    event_id: str
    title: str
    start: datetime.date
    end: datetime.date
    all_day: bool = False
    calendar_id: str = ''
    calendar_name: str = ''
    color: str = ''
    location: str = ''
    description: str = ''
    html_link: str = ''

    def sort_key(self):
        if self.all_day:
            return (self.start, 0, datetime.time.min, self.title)
        local = self.start.astimezone()
        return (local.date(), 1, local.time(), self.title)

    def to_dict(self):
        return {
            'id': self.event_id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'allDay': self.all_day,
            'calendarId': self.calendar_id,
            'calendarName': self.calendar_name,
            'color': self.color,
            'location': self.location,
            'description': self.description,
            'htmlLink': self.html_link,
        }

    @classmethod
    def from_dict(cls, data):
        all_day = bool(data['allDay'])
        parse = datetime.date.fromisoformat if all_day else datetime.datetime.fromisoformat
        return cls(
            event_id=data['id'],
            title=data['title'],
            start=parse(data['start']),
            end=parse(data['end']),
            all_day=all_day,
            calendar_id=data.get('calendarId', ''),
            calendar_name=data.get('calendarName', ''),
            color=data.get('color', ''),
            location=data.get('location', ''),
            description=data.get('description', ''),
            html_link=data.get('htmlLink', ''),
        )


@dataclass(frozen=True)
class Task:
    """A task from the "My Tasks" list."""
    task_id: str
    title: str
    tasklist_id: str
    due: datetime.date = None
    completed: bool = False
    notes: str = ''

    def mark_completed(self):
        return replace(self, completed=True)

    def mark_open(self):
        return replace(self, completed=False)

    def to_dict(self):
        return {
            'id': self.task_id,
            'title': self.title,
            'tasklistId': self.tasklist_id,
            'due': self.due.isoformat() if self.due else None,
            'completed': self.completed,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data):
        due = data.get('due')
        return cls(
            task_id=data['id'],
            title=data['title'],
            tasklist_id=data['tasklistId'],
            due=datetime.date.fromisoformat(due) if due else None,
            completed=bool(data.get('completed', False)),
            notes=data.get('notes', ''),
        )


@dataclass(frozen=True)
class Dataset:
    """Events and tasks from one fetch, covering [range_start, range_end)."""
    range_start: datetime.date
    range_end: datetime.date
    events: tuple = ()
    tasks: tuple = ()
    fetched_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc))

    def covers(self, start, end):
        return self.range_start <= start and end <= self.range_end

    def find_task(self, task_id):
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def with_task(self, task):
        """Return a copy with the task of the same id swapped for `task`."""
        tasks = tuple(task if t.task_id == task.task_id else t for t in self.tasks)
        return replace(self, tasks=tasks)
