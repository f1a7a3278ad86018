"""
Background workers for non-blocking highlighting.

Provides QThread-based workers for:
- Colorizing a source text
- Building compiled languages ahead of first use

All workers use Qt signals for thread-safe communication
with the UI thread.
"""

from codecolor.workers.base_worker import (
    BaseWorker,
    CancelledException,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from codecolor.workers.highlight_worker import (
    HighlightWorker,
    PrewarmWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'CancelledException',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Highlighting
    'HighlightWorker',
    'PrewarmWorker',
]
