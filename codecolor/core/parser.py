"""
Tokenizer that turns source text into a stream of scoped captures.

The scan is iterative. Nested-language regions live on an explicit
stack of frames, so the nesting depth is bounded and checked on every
push instead of relying on Python recursion.

Matching policy:
- the earliest-starting match wins
- among matches at the same position, the earlier-declared rule wins
- inside a nested region the end pattern competes with the inner rules
  and wins ties

Every character of the input ends up in exactly one capture; text that no
rule matches is emitted with the scope path of the enclosing region.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from re import Match, Pattern
from typing import Iterator, Optional, Protocol, Union

from codecolor.core import guard
from codecolor.core.compiler import LanguageCompiler, default_compiler
from codecolor.core.errors import NestingDepthExceededError, PreconditionError
from codecolor.core.models import Capture, CompiledLanguage, CompiledRule, Language


DEFAULT_MAX_DEPTH = 64


class CaptureSink(Protocol):
    """Receives captures one at a time, in document order."""

    def write(self, capture: Capture) -> None:
        ...


@dataclass
class _Frame:
    """One active language on the grammar stack."""
    language: CompiledLanguage
    scopes: tuple[str, ...]
    opened_at: int
    end_regex: Optional[Pattern] = None
    end_scopes: tuple[tuple[int, str], ...] = ()


class _MatchCache:
    """
    Remembers the last search result per pattern.

    A search from ``p1`` that found a match at ``s`` (or nothing) gives the
    same answer for any later start ``p2 <= s``, so the scan does not
    re-search text it has already looked at.
    """

    def __init__(self):
        self._entries: dict[Pattern, tuple[int, Optional[Match]]] = {}

    def search(self, regex: Pattern, text: str, pos: int) -> Optional[Match]:
        cached = self._entries.get(regex)
        if cached is not None:
            searched_from, match = cached
            if searched_from <= pos and (match is None or match.start() >= pos):
                return match
        match = regex.search(text, pos)
        self._entries[regex] = (pos, match)
        return match


class LanguageParser:
    """
    Scans source text with a language and yields captures.

    Usage:
        parser = LanguageParser()
        for capture in parser.parse(source, "python"):
            print(capture.text, capture.scopes)
    """

    def __init__(
        self,
        compiler: Optional[LanguageCompiler] = None,
        max_depth: int = DEFAULT_MAX_DEPTH
    ):
        self.compiler = compiler if compiler is not None else default_compiler()
        self.max_depth = _check_depth(max_depth)

    def parse(
        self,
        source_text: str,
        language: Union[Language, str],
        max_depth: Optional[int] = None
    ) -> Iterator[Capture]:
        """
        Tokenize ``source_text``.

        Arguments are checked and every reachable grammar is compiled before
        this returns, so those errors are raised here rather than on the
        first iteration. The returned iterator is single-pass.

        Raises:
            PreconditionError: if an argument is missing or invalid
            GrammarError: if a reachable language is malformed
            NestingDepthExceededError: during iteration, when nested regions
                exceed ``max_depth``
        """
        guard.arg_is_str(source_text, "source_text")
        resolved = self.resolve_language(language)
        depth = self.max_depth if max_depth is None else _check_depth(max_depth)
        closure = self.compiler.compile_closure(resolved)
        return self._scan(source_text, closure, closure[resolved.id], depth)

    def parse_into(
        self,
        source_text: str,
        language: Union[Language, str],
        sink: CaptureSink,
        max_depth: Optional[int] = None
    ) -> int:
        """Push every capture to ``sink``; returns the number delivered."""
        guard.arg_not_none(sink, "sink")
        count = 0
        for capture in self.parse(source_text, language, max_depth):
            sink.write(capture)
            count += 1
        return count

    def resolve_language(self, language: Union[Language, str]) -> Language:
        """Accept a Language or a registered id/alias."""
        guard.arg_not_none(language, "language")
        if isinstance(language, Language):
            return language
        if isinstance(language, str):
            guard.arg_not_empty(language, "language")
            return self.compiler.repository.get(language)
        raise PreconditionError(
            "language",
            f"Argument 'language' must be a Language or id, not {type(language).__name__}",
        )

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _scan(
        self,
        text: str,
        closure: dict[str, CompiledLanguage],
        top: CompiledLanguage,
        max_depth: int
    ) -> Iterator[Capture]:
        stack = [_Frame(language=top, scopes=(), opened_at=0)]
        cache = _MatchCache()
        length = len(text)
        cursor = 0
        pending = 0     # start of unmatched text not yet emitted
        stalled_at = -1  # position where a region just closed without progress

        while cursor < length:
            frame = stack[-1]
            depth = len(stack) - 1
            found = self._next_rule_match(frame.language, text, cursor, cache)
            end_match = None
            if frame.end_regex is not None:
                end_match = cache.search(frame.end_regex, text, cursor)

            if end_match is not None and (found is None or end_match.start() <= found[1].start()):
                start, end = end_match.span()
                yield from _plain(text, pending, start, frame.scopes, depth)
                stack.pop()
                parent = stack[-1]
                yield from _scoped(text, end_match, 0, frame.end_scopes, parent.scopes, depth - 1)
                if end == frame.opened_at:
                    stalled_at = end
                cursor = pending = end
                continue

            if found is None:
                break

            rule, match = found
            start, end = match.span(rule.group_offset)

            if start == end and (not rule.is_nesting or start == stalled_at):
                # nothing to emit; let the character at ``start`` go as plain text
                cursor = min(start + 1, length)
                continue

            if rule.is_nesting and depth >= max_depth:
                names = [f.language.id for f in stack] + [rule.nested_language.id]
                logging.warning(
                    f"LanguageParser - Nesting depth {max_depth} exceeded at {start} "
                    f"({' > '.join(names)})"
                )
                raise NestingDepthExceededError(max_depth, start, names)

            yield from _plain(text, pending, start, frame.scopes, depth)
            yield from _scoped(text, match, rule.group_offset, rule.scopes, frame.scopes, depth)
            cursor = pending = end

            if rule.is_nesting:
                nested_scope = rule.rule.nested_scope
                stack.append(_Frame(
                    language=closure[rule.nested_language.id],
                    scopes=frame.scopes + ((nested_scope,) if nested_scope else ()),
                    opened_at=end,
                    end_regex=rule.end_regex,
                    end_scopes=rule.end_scopes,
                ))

        frame = stack[-1]
        yield from _plain(text, pending, length, frame.scopes, len(stack) - 1)
        if len(stack) > 1:
            logging.debug(
                f"LanguageParser - Closed {len(stack) - 1} unterminated region(s) "
                f"at end of input ({frame.language.id})"
            )

    def _next_rule_match(
        self,
        language: CompiledLanguage,
        text: str,
        pos: int,
        cache: _MatchCache
    ) -> Optional[tuple[CompiledRule, Match]]:
        if language.combined is not None:
            match = cache.search(language.combined, text, pos)
            if match is None:
                return None
            rule = language.rule_for_group.get(match.lastindex)
            if rule is None:
                rule = next(
                    r for group, r in language.rule_for_group.items()
                    if match.start(group) != -1
                )
            return rule, match

        best: Optional[tuple[CompiledRule, Match]] = None
        for rule in language.rules:
            match = cache.search(rule.regex, text, pos)
            if match is None:
                continue
            if best is None or match.start() < best[1].start():
                best = (rule, match)
                if match.start() == pos:
                    break
        return best


# =============================================================================
# Capture Construction
# =============================================================================

def _plain(
    text: str,
    start: int,
    end: int,
    scopes: tuple[str, ...],
    depth: int
) -> Iterator[Capture]:
    if start < end:
        yield Capture(start, end, text[start:end], scopes, depth)


def _scoped(
    text: str,
    match: Match,
    offset: int,
    group_scopes: tuple[tuple[int, str], ...],
    base: tuple[str, ...],
    depth: int
) -> Iterator[Capture]:
    """
    Split a match into captures.

    The matched span is cut at every mapped group boundary. Each piece gets
    ``base`` plus the scopes of the groups covering it, outermost first;
    neighbouring pieces with the same path are merged.
    """
    start, end = match.span(offset)
    if start == end:
        return

    spans = []
    for group, scope in group_scopes:
        g_start, g_end = match.span(offset + group)
        if g_start == -1:
            continue
        g_start, g_end = max(g_start, start), min(g_end, end)
        if g_start < g_end:
            spans.append((g_start, g_end, group, scope))
    spans.sort(key=lambda span: (span[0], -span[1], span[2]))

    bounds = sorted({start, end, *(s for s, _, _, _ in spans), *(e for _, e, _, _ in spans)})
    run_start = start
    run_path: Optional[tuple[str, ...]] = None

    for piece_start, piece_end in zip(bounds, bounds[1:]):
        path = base + tuple(
            scope for s, e, _, scope in spans if s <= piece_start and piece_end <= e
        )
        if run_path is not None and path != run_path:
            yield Capture(run_start, piece_start, text[run_start:piece_start], run_path, depth)
            run_start = piece_start
        run_path = path

    yield Capture(run_start, end, text[run_start:end], run_path, depth)


def _check_depth(max_depth: int) -> int:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
        raise PreconditionError("max_depth", "Argument 'max_depth' must be a non-negative integer")
    return max_depth
