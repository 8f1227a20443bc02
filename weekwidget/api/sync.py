"""Coordinates what the widget shows with what was fetched and cached.

The UI thread owns the displayed dataset; the worker thread only runs
`fetch`. Every successful fetch replaces the dataset (and the cache file)
wholesale. The only state carried across a refresh is the set of task
completions the API has not acknowledged yet.
"""

import datetime
import logging
import threading
from weekwidget.core.models import Dataset
from weekwidget.core.utils import start_of_day
from weekwidget.core.week import fetch_range

logger = logging.getLogger(__name__)


class SyncManager:
    """Owns the displayed dataset, the refresh slot and pending task completions."""

    def __init__(self, calendar_manager, task_manager, cache):
        self.calendar_manager = calendar_manager
        self.task_manager = task_manager
        self.cache = cache
        self.dataset = None
        self.is_live = False
        self.pending_completions = set()
        self._refresh_lock = threading.Lock()
        self._refresh_in_flight = False
        self._queued_window = None

    def load_cached(self):
        """Serve the cache on cold start. A live dataset is never overridden."""
        if self.is_live:
            return self.dataset
        cached = self.cache.load()
        if cached is not None:
            logger.info("Loaded %d events and %d tasks from cache",
                        len(cached.events), len(cached.tasks))
            self.dataset = cached
        return self.dataset

    def covers(self, window):
        """Whether the current dataset spans every day of `window`."""
        return self.dataset is not None and self.dataset.covers(window.start, window.end)

    def begin_refresh(self, window):
        """Claim the single refresh slot. Returns False, remembering `window`, if one is running."""
        with self._refresh_lock:
            if self._refresh_in_flight:
                self._queued_window = window
                return False
            self._refresh_in_flight = True
            return True

    def finish_refresh(self):
        """Release the refresh slot and return a window requested meanwhile, if any."""
        with self._refresh_lock:
            self._refresh_in_flight = False
            queued, self._queued_window = self._queued_window, None
            return queued

    @property
    def refresh_in_flight(self):
        return self._refresh_in_flight

    def fetch(self, window, tz=None):
        """Fetch a fresh dataset for `window` and its look-ahead. Runs on the worker thread.

        Bounds are midnights in `tz`, or local midnights when None.
        """
        range_start, range_end = fetch_range(window)
        events = self.calendar_manager.fetch_events(
            start_of_day(range_start, tz), start_of_day(range_end, tz))
        tasks = self.task_manager.fetch_tasks()
        return Dataset(
            range_start=range_start,
            range_end=range_end,
            events=tuple(events),
            tasks=tuple(tasks),
            fetched_at=datetime.datetime.now(datetime.timezone.utc),
        )

    def apply(self, dataset):
        """Make `dataset` the displayed one and persist it."""
        for task_id in self.pending_completions:
            task = dataset.find_task(task_id)
            if task is not None and not task.completed:
                dataset = dataset.with_task(task.mark_completed())

        self.dataset = dataset
        self.is_live = True
        self._save()
        return dataset

    def events(self):
        """Events of the current dataset, empty before anything is loaded."""
        return self.dataset.events if self.dataset else ()

    def tasks(self):
        """Tasks of the current dataset, empty before anything is loaded."""
        return self.dataset.tasks if self.dataset else ()

    def mark_task_completed(self, task_id):
        """Complete a task locally.

        Returns the task to push to the API, or None when there is nothing to
        do: unknown task, already completed, or a completion already pending.
        """
        if self.dataset is None or task_id in self.pending_completions:
            return None
        task = self.dataset.find_task(task_id)
        if task is None or task.completed:
            return None

        completed = task.mark_completed()
        self.dataset = self.dataset.with_task(completed)
        self.pending_completions.add(task_id)
        return completed

    def confirm_task_completed(self, task_id):
        """The API accepted the completion."""
        self.pending_completions.discard(task_id)
        self._save()

    def revert_task_completion(self, task_id):
        """The API refused the completion; show the task as open again."""
        self.pending_completions.discard(task_id)
        if self.dataset is None:
            return
        task = self.dataset.find_task(task_id)
        if task is not None and task.completed:
            self.dataset = self.dataset.with_task(task.mark_open())

    def _save(self):
        if self.dataset is None:
            return
        try:
            self.cache.save(self.dataset)
        except OSError as e:
            logger.warning("Could not write cache file: %s", e)
