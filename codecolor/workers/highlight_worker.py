"""
Workers for colorizing and pre-building grammars off the UI thread.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, Optional, Union

from PyQt6.QtCore import QObject

from codecolor.colorizer import CodeColorizer
from codecolor.core.compiler import LanguageCompiler, default_compiler
from codecolor.core.models import Language
from codecolor.formatting.base import Formatter
from codecolor.formatting.styles import StyleSheet
from codecolor.workers.base_worker import BaseWorker


class _CancellableWriter:
    """Collects output and gives the worker a cancellation point per write."""

    def __init__(self, worker: BaseWorker, check_interval: int = 256):
        self._worker = worker
        self._buffer = io.StringIO()
        self._check_interval = check_interval
        self._writes = 0

    def write(self, text: str) -> int:
        self._writes += 1
        if self._writes % self._check_interval == 0:
            self._worker.check_cancelled()
        return self._buffer.write(text)

    def getvalue(self) -> str:
        return self._buffer.getvalue()


class HighlightWorker(BaseWorker):
    """
    Colorizes one source text; the result is the formatted string.

    Usage:
        worker = HighlightWorker(source, "python", style_sheet="Monokai")
        worker.signals.finished.connect(view.setHtml)
    """

    def __init__(
        self,
        source_text: str,
        language: Union[Language, str],
        colorizer: Optional[CodeColorizer] = None,
        formatter: Optional[Union[Formatter, str]] = None,
        style_sheet: Optional[Union[StyleSheet, str]] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.source_text = source_text
        self.language = language
        self.colorizer = colorizer or CodeColorizer()
        self.formatter = formatter
        self.style_sheet = style_sheet

    def do_work(self) -> str:
        name = self.language.id if isinstance(self.language, Language) else self.language
        self.report_status(f"Highlighting {name}...")
        self.check_cancelled()

        writer = _CancellableWriter(self)
        self.colorizer.colorize(
            self.source_text,
            self.language,
            formatter=self.formatter,
            style_sheet=self.style_sheet,
            writer=writer,
        )
        length = len(self.source_text)
        self.report_progress(length, length, "Done")
        return writer.getvalue()


class PrewarmWorker(BaseWorker):
    """
    Builds compiled languages ahead of first use.

    The result is the list of language ids that were built.
    """

    def __init__(
        self,
        language_ids: Optional[Iterable[str]] = None,
        compiler: Optional[LanguageCompiler] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.compiler = compiler or default_compiler()
        self.language_ids = list(language_ids) if language_ids is not None else None

    def do_work(self) -> list[str]:
        repository = self.compiler.repository
        language_ids = self.language_ids
        if language_ids is None:
            language_ids = [i for i in repository.ids() if repository.is_compiled(i)]

        built = []
        total = len(language_ids)
        for index, language_id in enumerate(language_ids):
            self.check_cancelled()
            self.report_progress(index, total, f"Compiling {language_id}")
            built.append(self.compiler.get_or_build(language_id).id)

        self.report_progress(total, total, "Done")
        logging.debug(f"PrewarmWorker - Built {len(built)} languages")
        return built
