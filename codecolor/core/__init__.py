"""
Tokenization engine.

Provides:
- Grammar models (Rule, Language) and output captures
- LanguageCompiler and the shared compiled-language cache
- LanguageParser, the nesting-aware scanner
- Error types raised by all of the above
"""

from codecolor.core.errors import (
    CodeColorError,
    PreconditionError,
    UnknownLanguageError,
    GrammarError,
    NestingDepthExceededError,
)
from codecolor.core.scopes import Scope, ScopeName
from codecolor.core.models import (
    Rule,
    Language,
    CompiledRule,
    CompiledLanguage,
    Capture,
)
from codecolor.core.compiler import (
    CompiledLanguageCache,
    LanguageCompiler,
    default_compiler,
)
from codecolor.core.parser import (
    CaptureSink,
    LanguageParser,
    DEFAULT_MAX_DEPTH,
)

__all__ = [
    # Errors
    'CodeColorError',
    'PreconditionError',
    'UnknownLanguageError',
    'GrammarError',
    'NestingDepthExceededError',
    # Scopes
    'Scope',
    'ScopeName',
    # Models
    'Rule',
    'Language',
    'CompiledRule',
    'CompiledLanguage',
    'Capture',
    # Compiler
    'CompiledLanguageCache',
    'LanguageCompiler',
    'default_compiler',
    # Parser
    'CaptureSink',
    'LanguageParser',
    'DEFAULT_MAX_DEPTH',
]
