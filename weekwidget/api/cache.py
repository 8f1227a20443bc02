import datetime
import json
import logging
import os
import threading
from weekwidget.core.config import CACHE_FILE, CACHE_VERSION
from weekwidget.core.models import Dataset, Event, Task

logger = logging.getLogger(__name__)


class CacheManager:
    """Keeps the last fetched dataset on disk for an instant cold start.

    Each save replaces the file as a whole. A file that cannot be read back is
    deleted so the next live fetch rebuilds it.
    """

    def __init__(self, cache_file=CACHE_FILE):
        self.cache_file = cache_file
        self.cache_lock = threading.Lock()

    def load(self):
        """Return the cached Dataset, or None if there is no usable cache."""
        with self.cache_lock:
            if not os.path.exists(self.cache_file):
                return None
            try:
                with open(self.cache_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                return self._decode(data)
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning("Discarding malformed cache file %s: %s", self.cache_file, e)
                self._discard()
                return None

    def save(self, dataset):
        """Write `dataset`, superseding whatever was cached before."""
        payload = self._encode(dataset)
        with self.cache_lock:
            directory = os.path.dirname(self.cache_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = self.cache_file + '.tmp'
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.cache_file)

    def _discard(self):
        try:
            os.remove(self.cache_file)
        except FileNotFoundError:
            pass

    @staticmethod
    def _encode(dataset):
        return {
            'version': CACHE_VERSION,
            'fetchedAt': dataset.fetched_at.isoformat(),
            'rangeStart': dataset.range_start.isoformat(),
            'rangeEnd': dataset.range_end.isoformat(),
            'events': [event.to_dict() for event in dataset.events],
            'tasks': [task.to_dict() for task in dataset.tasks],
        }

    @staticmethod
    def _decode(data):
        if data.get('version') != CACHE_VERSION:
            raise ValueError(f"unsupported cache version {data.get('version')!r}")
        return Dataset(
            range_start=datetime.date.fromisoformat(data['rangeStart']),
            range_end=datetime.date.fromisoformat(data['rangeEnd']),
            events=tuple(Event.from_dict(e) for e in data['events']),
            tasks=tuple(Task.from_dict(t) for t in data['tasks']),
            fetched_at=datetime.datetime.fromisoformat(data['fetchedAt']),
        )
