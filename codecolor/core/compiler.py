"""
Grammar compiler and the shared compiled-language cache.

Provides:
- LanguageCompiler: turns a Language into a CompiledLanguage
- CompiledLanguageCache: thread-safe, build-once store keyed by language id
- default_compiler(): the process-wide compiler over the default repository

A compiled language folds every rule into one alternation, so a single
search finds the earliest match of any rule. Python's alternation tries
alternatives left to right at each position, which gives the required
tie-break: earliest start first, then declared rule order.
"""

from __future__ import annotations

import logging
import re
from threading import Lock
from re import Pattern
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional

from codecolor.core.errors import GrammarError, UnknownLanguageError
from codecolor.core.models import CaptureKey, CompiledLanguage, CompiledRule, Language, Rule
from codecolor.core.scopes import Scope

if TYPE_CHECKING:
    from codecolor.languages.repository import LanguageRepository


BASE_FLAGS = re.MULTILINE

_SCOPED_FLAG_LETTERS = (
    (re.IGNORECASE, 'i'),
    (re.DOTALL, 's'),
    (re.VERBOSE, 'x'),
)

_LEADING_FLAGS_RE = re.compile(r'^\(\?([aiLmsux]+)\)')

_FLAG_FOR_LETTER = {
    'a': re.ASCII,
    'i': re.IGNORECASE,
    'L': re.LOCALE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'u': re.UNICODE,
    'x': re.VERBOSE,
}


# =============================================================================
# Cache
# =============================================================================

class CompiledLanguageCache:
    """
    Process-wide store of compiled languages.

    Reads of built entries never take a lock. Building is serialized per
    language id, so concurrent first use of one id runs the builder once
    while builds of other ids proceed independently.
    """

    def __init__(self):
        self._entries: dict[str, CompiledLanguage] = {}
        self._build_locks: dict[str, Lock] = {}
        self._generations: dict[str, int] = {}
        self._lock = Lock()
        self._build_count = 0

    def __contains__(self, language_id: str) -> bool:
        return language_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def build_count(self) -> int:
        """Number of builds retained since creation."""
        with self._lock:
            return self._build_count

    def get(self, language_id: str) -> Optional[CompiledLanguage]:
        return self._entries.get(language_id)

    def get_or_build(
        self,
        language_id: str,
        builder: Callable[[], CompiledLanguage]
    ) -> CompiledLanguage:
        """
        Return the cached entry, building it first if needed.

        If ``builder`` raises, nothing is stored and the error propagates.
        """
        entry = self._entries.get(language_id)
        if entry is not None:
            return entry

        with self._lock:
            build_lock = self._build_locks.setdefault(language_id, Lock())

        with build_lock:
            entry = self._entries.get(language_id)
            if entry is not None:
                return entry

            with self._lock:
                generation = self._generations.get(language_id, 0)

            entry = builder()

            with self._lock:
                # An invalidation during the build means the result is stale
                if self._generations.get(language_id, 0) == generation:
                    self._entries[language_id] = entry
                    self._build_count += 1
            return entry

    def invalidate(self, language_id: str) -> None:
        """Drop one entry; the next request rebuilds it."""
        with self._lock:
            self._generations[language_id] = self._generations.get(language_id, 0) + 1
            self._entries.pop(language_id, None)

    def clear(self) -> None:
        with self._lock:
            for language_id in list(self._entries):
                self._generations[language_id] = self._generations.get(language_id, 0) + 1
            self._entries.clear()

    def language_ids(self) -> list[str]:
        return list(self._entries)


# =============================================================================
# Pattern Rewriting
# =============================================================================

def _split_leading_flags(pattern: str, flags: int) -> tuple[str, int]:
    """Move a leading ``(?imsx)`` into ``flags``; it is illegal mid-pattern."""
    match = _LEADING_FLAGS_RE.match(pattern)
    while match:
        for letter in match.group(1):
            flags |= _FLAG_FOR_LETTER[letter]
        pattern = pattern[match.end():]
        match = _LEADING_FLAGS_RE.match(pattern)
    return pattern, flags


def _isolate_groups(
    pattern: str,
    index: int,
    group_names: Mapping[int, str],
    verbose: bool = False
) -> str:
    """
    Rewrite ``pattern`` so it can sit inside a larger alternation.

    Every capturing group gets a name unique to rule ``index``: named groups
    keep theirs behind an ``r{index}_`` prefix and numbered ones become
    ``g{index}_{number}``. Numeric back-references and conditionals are
    turned into references by name, so they stay valid however many groups
    precede the rule. Character classes and verbose comments are copied
    unchanged.
    """
    prefix = f"r{index}_"

    def name_of(number: int) -> str:
        if number in group_names:
            return prefix + group_names[number]
        return f"g{index}_{number}"

    out: list[str] = []
    i = 0
    n = len(pattern)
    in_class = False
    group = 0

    while i < n:
        ch = pattern[i]

        if ch == '\\' and i + 1 < n:
            nxt = pattern[i + 1]
            if not in_class and nxt.isdigit() and nxt != '0':
                j = i + 1
                while j < n and j < i + 3 and pattern[j].isdigit():
                    j += 1
                digits = pattern[i + 1:j]
                if (len(digits) == 2 and j < n
                        and all(d in '01234567' for d in pattern[i + 1:j + 1])):
                    # three octal digits are a character escape
                    out.append(pattern[i:j + 1])
                    i = j + 1
                    continue
                out.append(f"(?P={name_of(int(digits))})")
                i = j
                continue
            out.append(pattern[i:i + 2])
            i += 2
            continue

        if in_class:
            if ch == ']':
                in_class = False
            out.append(ch)
            i += 1
            continue

        if ch == '[':
            in_class = True
            out.append(ch)
            i += 1
            # a ']' right after '[' or '[^' is a literal
            if i < n and pattern[i] == '^':
                out.append('^')
                i += 1
            if i < n and pattern[i] == ']':
                out.append(']')
                i += 1
            continue

        if verbose and ch == '#':
            close = pattern.find('\n', i)
            close = n if close == -1 else close
            out.append(pattern[i:close])
            i = close
            continue

        if ch != '(':
            out.append(ch)
            i += 1
            continue

        if pattern.startswith('(?P<', i):
            close = pattern.index('>', i)
            group += 1
            out.append(f"(?P<{prefix}{pattern[i + 4:close]}>")
            i = close + 1
        elif pattern.startswith('(?P=', i):
            close = pattern.index(')', i)
            out.append(f"(?P={prefix}{pattern[i + 4:close]})")
            i = close + 1
        elif pattern.startswith('(?(', i):
            close = pattern.index(')', i + 3)
            ref = pattern[i + 3:close]
            ref = name_of(int(ref)) if ref.isdigit() else prefix + ref
            out.append(f"(?({ref})")
            i = close + 1
        elif pattern.startswith('(?', i):
            out.append('(?')
            i += 2
        else:
            group += 1
            out.append(f"(?P<{name_of(group)}>")
            i += 1

    return ''.join(out)


def _scoped_flag_prefix(flags: int) -> str:
    letters = ''.join(letter for flag, letter in _SCOPED_FLAG_LETTERS if flags & flag)
    if flags & re.ASCII:
        letters = 'a' + letters
    return f"(?{letters}:" if letters else "(?:"


# =============================================================================
# Compiler
# =============================================================================

class LanguageCompiler:
    """
    Compiles languages and owns their cache.

    ``repository`` resolves language ids (nested references and
    ``get_or_build``); only languages it marks as compiled are cached and
    matched through a combined pattern.
    """

    def __init__(
        self,
        repository: Optional[LanguageRepository] = None,
        cache: Optional[CompiledLanguageCache] = None,
        combine_rules: bool = True
    ):
        if repository is None:
            from codecolor.languages import default_repository
            repository = default_repository()
        self.repository = repository
        self.cache = cache if cache is not None else CompiledLanguageCache()
        self.combine_rules = combine_rules
        self.repository.add_observer(self.cache.invalidate)

    # -------------------------------------------------------------------------
    # Cache access
    # -------------------------------------------------------------------------

    def get_or_build(self, language_id: str) -> CompiledLanguage:
        """
        Return the compiled form of a registered language.

        Languages registered as compiled are built once and shared; others
        are compiled rule-by-rule on every call.
        """
        language = self.repository.get(language_id)
        if not self.repository.is_compiled(language.id):
            return self.compile(language, combine=False)

        def build() -> CompiledLanguage:
            # fetched after the cache reads its generation
            current = self.repository.get(language.id)
            logging.debug(f"LanguageCompiler - Building compiled language {current.id}")
            return self.compile(current, combine=self.combine_rules)

        return self.cache.get_or_build(language.id, build)

    def prewarm(self, language_ids: Optional[Iterable[str]] = None) -> list[CompiledLanguage]:
        """Build languages ahead of first use (all compiled ones by default)."""
        if language_ids is None:
            language_ids = [
                language.id for language in self.repository.all()
                if self.repository.is_compiled(language.id)
            ]
        built = [self.get_or_build(language_id) for language_id in language_ids]
        logging.debug(f"LanguageCompiler - Prewarmed {len(built)} languages")
        return built

    def resolve(self, language: Language) -> CompiledLanguage:
        """Compile ``language``, going through the cache when it is registered."""
        registered = self.repository.find(language.id)
        if registered is not None and (registered is language or registered == language):
            return self.get_or_build(language.id)
        return self.compile(language, combine=False)

    def compile_closure(self, language: Language) -> dict[str, CompiledLanguage]:
        """
        Compile ``language`` and every language reachable from it.

        Nested references are followed once each, so cycles terminate and
        every grammar error surfaces before scanning starts.
        """
        compiled: dict[str, CompiledLanguage] = {}
        pending = [language]
        while pending:
            current = pending.pop()
            existing = compiled.get(current.id)
            if existing is not None:
                if existing.language != current:
                    raise GrammarError(
                        current.id, "two different languages share this id"
                    )
                continue
            artifact = self.resolve(current)
            compiled[current.id] = artifact
            for rule in artifact.rules:
                if rule.nested_language is not None:
                    pending.append(rule.nested_language)
        return compiled

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def compile(self, language: Language, combine: bool = True) -> CompiledLanguage:
        """
        Build a CompiledLanguage; deterministic for a given definition.

        Raises:
            GrammarError: if any rule is malformed or shadowed by an
                earlier rule with the same pattern and flags
        """
        first_index: dict[tuple[str, int], int] = {}
        for index, rule in enumerate(language.rules):
            earlier = first_index.setdefault((rule.pattern, rule.flags), index)
            if earlier != index:
                raise GrammarError(
                    language.id, f"unreachable: rule {earlier} has the same pattern and flags", index
                )

        standalone = [
            self._compile_rule(language, index, rule)
            for index, rule in enumerate(language.rules)
        ]
        if not combine or not standalone:
            return CompiledLanguage(language=language, rules=tuple(standalone))

        parts = []
        rules = []
        rule_for_group: dict[int, CompiledRule] = {}
        next_group = 1

        for compiled in standalone:
            wrapper = next_group
            pattern, flags = _split_leading_flags(compiled.rule.pattern, compiled.rule.flags)
            group_names = {number: name for name, number in compiled.regex.groupindex.items()}
            body = _isolate_groups(
                pattern, compiled.index, group_names, verbose=bool(flags & re.VERBOSE)
            )
            if flags & re.VERBOSE:
                body += '\n'
            parts.append(f"({_scoped_flag_prefix(flags)}{body}))")

            relocated = CompiledRule(
                index=compiled.index,
                rule=compiled.rule,
                regex=compiled.regex,
                group_offset=wrapper,
                scopes=compiled.scopes,
                nested_language=compiled.nested_language,
                end_regex=compiled.end_regex,
                end_scopes=compiled.end_scopes,
            )
            rules.append(relocated)
            rule_for_group[wrapper] = relocated
            next_group = wrapper + 1 + compiled.regex.groups

        try:
            combined = re.compile('|'.join(parts), BASE_FLAGS)
        except re.error as e:
            raise GrammarError(language.id, f"rules cannot be combined: {e}") from e

        if combined.groups != next_group - 1:
            raise GrammarError(language.id, "rules cannot be combined: group count mismatch")

        return CompiledLanguage(
            language=language,
            rules=tuple(rules),
            combined=combined,
            rule_for_group=rule_for_group,
        )

    def _compile_rule(self, language: Language, index: int, rule: Rule) -> CompiledRule:
        regex = self._compile_pattern(language, index, rule.pattern, rule.flags, "pattern")
        scopes = self._resolve_captures(language, index, regex, rule.captures, "captures")

        if rule.nested_language is None:
            if rule.end_pattern is not None:
                raise GrammarError(
                    language.id, "end pattern given without a nested language", index
                )
            if rule.nested_scope is not None:
                raise GrammarError(
                    language.id, "nested scope given without a nested language", index
                )
            return CompiledRule(
                index=index, rule=rule, regex=regex, group_offset=0, scopes=scopes
            )

        if not rule.end_pattern:
            raise GrammarError(
                language.id,
                f"nested language {rule.nested_language_id!r} has no end pattern",
                index,
            )
        if rule.nested_scope is not None:
            self._check_scope(language, index, rule.nested_scope)

        nested = self._resolve_nested(language, index, rule)
        end_regex = self._compile_pattern(language, index, rule.end_pattern, rule.flags, "end pattern")
        end_captures = rule.effective_end_captures
        if rule.end_captures is None:
            # inherited scopes only apply where the end pattern has the group
            end_captures = {
                key: scope for key, scope in end_captures.items()
                if _has_group(end_regex, key)
            }
        end_scopes = self._resolve_captures(language, index, end_regex, end_captures, "end captures")

        return CompiledRule(
            index=index,
            rule=rule,
            regex=regex,
            group_offset=0,
            scopes=scopes,
            nested_language=nested,
            end_regex=end_regex,
            end_scopes=end_scopes,
        )

    def _compile_pattern(
        self,
        language: Language,
        index: int,
        pattern: str,
        flags: int,
        what: str
    ) -> Pattern:
        if not isinstance(pattern, str) or not pattern:
            raise GrammarError(language.id, f"{what} cannot be empty", index)
        try:
            return re.compile(pattern, flags | BASE_FLAGS)
        except re.error as e:
            raise GrammarError(language.id, f"invalid {what} {pattern!r}: {e}", index) from e

    def _resolve_captures(
        self,
        language: Language,
        index: int,
        regex: Pattern,
        captures: Mapping[CaptureKey, str],
        what: str
    ) -> tuple[tuple[int, str], ...]:
        resolved: dict[int, str] = {}
        for key, scope in captures.items():
            if isinstance(key, bool):
                raise GrammarError(language.id, f"{what}: invalid group {key!r}", index)
            if isinstance(key, int):
                if not 0 <= key <= regex.groups:
                    raise GrammarError(
                        language.id, f"{what}: pattern has no group {key}", index
                    )
                group = key
            elif isinstance(key, str) and key in regex.groupindex:
                group = regex.groupindex[key]
            else:
                raise GrammarError(
                    language.id, f"{what}: pattern has no group {key!r}", index
                )
            self._check_scope(language, index, scope)
            resolved[group] = scope
        return tuple(sorted(resolved.items()))

    def _check_scope(self, language: Language, index: int, scope: str) -> None:
        try:
            Scope(scope)
        except (TypeError, ValueError, AttributeError) as e:
            raise GrammarError(language.id, f"invalid scope {scope!r}", index) from e

    def _resolve_nested(self, language: Language, index: int, rule: Rule) -> Language:
        if isinstance(rule.nested_language, Language):
            return rule.nested_language
        if rule.nested_language_id == language.id:
            return language
        nested = self.repository.find(rule.nested_language_id)
        if nested is None:
            raise GrammarError(
                language.id,
                f"nested language {rule.nested_language_id!r} is not registered",
                index,
            )
        return nested


def _has_group(regex: Pattern, key: CaptureKey) -> bool:
    if isinstance(key, int) and not isinstance(key, bool):
        return 0 <= key <= regex.groups
    return key in regex.groupindex


# =============================================================================
# Shared Instance
# =============================================================================

_default_compiler: Optional[LanguageCompiler] = None
_default_lock = Lock()


def default_compiler() -> LanguageCompiler:
    """The process-wide compiler, created on first use."""
    global _default_compiler
    compiler = _default_compiler
    if compiler is not None:
        return compiler
    with _default_lock:
        if _default_compiler is None:
            _default_compiler = LanguageCompiler()
        return _default_compiler
