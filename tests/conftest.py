import os

import pytest

from codecolor.core.compiler import LanguageCompiler
from codecolor.core.models import Language, Rule
from codecolor.core.parser import LanguageParser
from codecolor.languages import LanguageRepository, load_builtin_languages


## Fixtures for use in tests


@pytest.fixture
def repository():
    """A private repository loaded with the built-in languages."""
    return load_builtin_languages(LanguageRepository())


@pytest.fixture
def compiler(repository):
    return LanguageCompiler(repository=repository)


@pytest.fixture
def parser(compiler):
    return LanguageParser(compiler=compiler)


@pytest.fixture
def tokens(parser):
    """Parse and return ``(text, scopes)`` pairs."""
    def run(source, language, **kwargs):
        return [capture.as_tuple() for capture in parser.parse(source, language, **kwargs)]
    return run


@pytest.fixture
def mini():
    return Language("mini", [Rule(r"//.*", "Comment")])


@pytest.fixture
def nested():
    inner = Language("inner", [Rule("#", "Tag")])
    return Language("outer", [Rule("`", "Delim", nested_language=inner, end_pattern="`")])


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtGui = pytest.importorskip("PyQt6.QtGui")
    app = QtGui.QGuiApplication.instance() or QtGui.QGuiApplication([])
    yield app


def scopes_of(captures, text):
    """Scope paths of every capture with exactly ``text``."""
    return [scopes for capture_text, scopes in captures if capture_text == text]
