"""
Qt worker base for running highlighting jobs off the UI thread.

A worker owns one job. ``run`` drives it through its states and reports
the outcome through ``WorkerSignals``; the job itself lives in ``do_work``.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker

from codecolor.core.errors import CodeColorError


class WorkerState(Enum):
    """Lifecycle of a worker."""
    PENDING = auto()
    RUNNING = auto()
    CANCELLING = auto()
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()

    @property
    def is_finished(self) -> bool:
        return self in (WorkerState.CANCELLED, WorkerState.COMPLETED, WorkerState.FAILED)


class WorkerSignals(QObject):
    """Signals carrying job results back to the UI thread."""
    # (current, total, message)
    progress = pyqtSignal(int, int, str)
    status = pyqtSignal(str)
    started = pyqtSignal()
    finished = pyqtSignal(object)
    # (error_type, message)
    error = pyqtSignal(str, str)
    cancelled = pyqtSignal()
    state_changed = pyqtSignal(object)


class CancelledException(Exception):
    """Raised from ``check_cancelled`` to unwind a cancelled job."""


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Base class for highlighting jobs.

    Colorizer errors (bad grammar, unknown language, nesting too deep) are
    expected outcomes and are logged as warnings; anything else is logged
    as an error with its traceback. Both end in ``FAILED`` with the
    ``error`` signal.

    Usage:
        worker = HighlightWorker(source, "python")
        thread = WorkerThread(worker)
        worker.signals.finished.connect(on_html)
        thread.start()
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancel_requested = False
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None
        self._started_at: Optional[float] = None
        self._elapsed: Optional[float] = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    def _set_state(self, value: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = value
        self.signals.state_changed.emit(value)

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancel_requested

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """(error_type, message) of a failed job."""
        return self._error

    @property
    def elapsed(self) -> Optional[float]:
        """Seconds spent in ``do_work``, once finished."""
        return self._elapsed

    def cancel(self) -> None:
        """Ask the job to stop at its next cancellation point."""
        with QMutexLocker(self._mutex):
            if self._state.is_finished:
                return
            self._cancel_requested = True
            if self._state == WorkerState.RUNNING:
                self._state = WorkerState.CANCELLING
        self.signals.state_changed.emit(WorkerState.CANCELLING)

    @pyqtSlot()
    def run(self) -> None:
        self._set_state(WorkerState.RUNNING)
        self.signals.started.emit()
        self._started_at = time.perf_counter()

        try:
            result = self.do_work()
        except CancelledException:
            self._finish_cancelled()
        except CodeColorError as e:
            logging.warning(f"{type(self).__name__} - {type(e).__name__}: {e}")
            self._finish_failed(e)
        except Exception as e:
            logging.exception(f"{type(self).__name__} - Unexpected {type(e).__name__}: {e}")
            self._finish_failed(e)
        else:
            if self.is_cancelled:
                self._finish_cancelled()
            else:
                self._result = result
                self._stop_clock()
                self._set_state(WorkerState.COMPLETED)
                self.signals.finished.emit(result)

    def _stop_clock(self) -> None:
        self._elapsed = time.perf_counter() - self._started_at

    def _finish_cancelled(self) -> None:
        self._stop_clock()
        self._set_state(WorkerState.CANCELLED)
        self.signals.cancelled.emit()

    def _finish_failed(self, exc: Exception) -> None:
        self._stop_clock()
        self._error = (type(exc).__name__, str(exc))
        self._set_state(WorkerState.FAILED)
        self.signals.error.emit(*self._error)

    @abstractmethod
    def do_work(self) -> Any:
        """Run the job; call ``check_cancelled`` between steps."""

    def report_progress(self, current: int, total: int, message: str = "") -> None:
        self.signals.progress.emit(current, total, message)

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)

    def check_cancelled(self) -> None:
        if self.is_cancelled:
            raise CancelledException(f"{type(self).__name__} cancelled")


class WorkerThread(QThread):
    """
    Runs one worker on its own thread and quits when the job ends.

    Usage:
        thread = WorkerThread(PrewarmWorker())
        thread.start()
    """

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker
        worker.moveToThread(self)
        self.started.connect(worker.run)
        for signal in (worker.signals.finished, worker.signals.error, worker.signals.cancelled):
            signal.connect(self.quit)

    def cancel(self) -> None:
        self.worker.cancel()
