import logging
from weekwidget.api.base import GoogleApiManager
from weekwidget.core.config import API_MAX_RESULTS, DEFAULT_TASKLIST_ID, TASKLIST_TITLE
from weekwidget.core.models import Task
from weekwidget.core.utils import parse_api_date

logger = logging.getLogger(__name__)

TASKS_PAGE_SIZE = min(API_MAX_RESULTS, 100)


class TaskManager(GoogleApiManager):
    """Reads and completes tasks in the "My Tasks" list."""

    service_name = 'tasks'
    service_version = 'v1'

    def __init__(self, auth_manager, tasklist_title=TASKLIST_TITLE, **kwargs):
        super().__init__(auth_manager, **kwargs)
        self.tasklist_title = tasklist_title
        self.tasklist_id = None

    def resolve_tasklist(self):
        """Find the id of the task list named `tasklist_title`, falling back to the default list."""
        if self.tasklist_id:
            return self.tasklist_id

        lists = self._list_all(
            lambda service, **page: service.tasklists().list(**page),
            TASKS_PAGE_SIZE,
        )
        for tasklist in lists:
            if tasklist.get('title') == self.tasklist_title:
                self.tasklist_id = tasklist['id']
                break
        else:
            logger.info("No task list titled %r, using the default list", self.tasklist_title)
            self.tasklist_id = DEFAULT_TASKLIST_ID
        return self.tasklist_id

    def fetch_tasks(self):
        """Fetch the open tasks of the list."""
        tasklist_id = self.resolve_tasklist()
        items = self._list_all(
            lambda service, **page: service.tasks().list(
                tasklist=tasklist_id, showCompleted=False, showHidden=False, **page),
            TASKS_PAGE_SIZE,
        )

        tasks = []
        for item in items:
            title = (item.get('title') or '').strip()
            if not title or not item.get('id'):
                continue
            tasks.append(Task(
                task_id=item['id'],
                title=title,
                tasklist_id=tasklist_id,
                due=parse_api_date(item.get('due')),
                completed=item.get('status') == 'completed',
                notes=item.get('notes', ''),
            ))
        logger.info("Fetched %d tasks", len(tasks))
        return tasks

    def complete_task(self, tasklist_id, task_id):
        """Mark a task completed. Completing an already completed task is harmless."""
        result = self._execute(
            lambda service: service.tasks().patch(
                tasklist=tasklist_id,
                task=task_id,
                body={'status': 'completed'},
            )
        )
        logger.info("Completed task %s", task_id)
        return result
