import logging
import queue
from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

QUIET_JOBS = ('complete_task',)


class APIWorker(QThread):
    """Worker thread that runs API jobs one at a time without blocking the UI."""
    jobCompleted = pyqtSignal(object, object, object)
    jobFailed = pyqtSignal(object, object, object)
    loadingChanged = pyqtSignal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.queue = queue.Queue()
        self.running = True

    def add_job(self, job_type, func, context=None, **kwargs):
        """Queue `func(**kwargs)`.

        The result or the raised error comes back on the UI thread together
        with `job_type` and `context`.
        """
        self.queue.put((job_type, func, context, kwargs))

        if not self.isRunning():
            self.start()

    def run(self):
        """Main worker loop that processes queued jobs."""
        while self.running:
            try:
                job_type, func, context, kwargs = self.queue.get(block=True, timeout=0.5)
            except queue.Empty:
                continue

            try:
                if job_type not in QUIET_JOBS:
                    self.loadingChanged.emit(True)

                result = func(**kwargs)
                self.jobCompleted.emit(result, job_type, context)

            except Exception as e:
                logger.warning("Error in worker thread (%s): %s", job_type, e)
                self.jobFailed.emit(e, job_type, context)

            finally:
                if job_type not in QUIET_JOBS:
                    self.loadingChanged.emit(False)
                self.queue.task_done()

        logger.debug("Worker thread stopped")

    def stop(self):
        """Stop the worker thread."""
        self.running = False
        self.wait(1000)
