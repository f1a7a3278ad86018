import logging

import pytest

from codecolor.core.errors import (
    NestingDepthExceededError,
    PreconditionError,
    UnknownLanguageError,
)
from codecolor.core.models import Language, Rule
from codecolor.core.parser import LanguageParser
from codecolor.core.compiler import LanguageCompiler


class ListSink:
    def __init__(self):
        self.captures = []

    def write(self, capture):
        self.captures.append(capture)


class TestScenarios:
    def test_mini(self, tokens, mini):
        assert tokens("a // b\nc", mini) == [
            ("a ", []),
            ("// b", ["Comment"]),
            ("\nc", []),
        ]

    def test_nested(self, tokens, nested):
        assert tokens("x `#y` z", nested) == [
            ("x ", []),
            ("`", ["Delim"]),
            ("#", ["Tag"]),
            ("y", []),
            ("`", ["Delim"]),
            (" z", []),
        ]

    def test_nested_depths(self, parser, nested):
        depths = [(c.text, c.depth) for c in parser.parse("x `#y` z", nested)]
        assert depths == [("x ", 0), ("`", 0), ("#", 1), ("y", 1), ("`", 0), (" z", 0)]

    def test_positions_are_contiguous(self, parser, nested):
        captures = list(parser.parse("x `#y` z", nested))
        assert captures[0].start == 0
        for before, after in zip(captures, captures[1:]):
            assert before.end == after.start
        assert captures[-1].end == len("x `#y` z")

    def test_empty_input(self, tokens, mini):
        assert tokens("", mini) == []

    def test_language_without_rules(self, tokens):
        assert tokens("anything", Language("bare")) == [("anything", [])]


class TestMatchingPolicy:
    def test_earlier_rule_wins_at_same_start(self, tokens):
        language = Language("p", [Rule("ab", "First"), Rule("abc", "Second")])
        assert tokens("abc", language) == [("ab", ["First"]), ("c", [])]

    def test_earliest_start_beats_priority(self, tokens):
        language = Language("p", [Rule("b", "B"), Rule("a", "A")])
        assert tokens("ab", language) == [("a", ["A"]), ("b", ["B"])]

    def test_end_pattern_wins_ties(self, tokens):
        inner = Language("inner", [Rule(r"\)", "Paren")])
        outer = Language("outer", [Rule(r"\(", "Open", nested_language=inner, end_pattern=r"\)")])
        assert tokens("(a)", outer) == [("(", ["Open"]), ("a", []), (")", ["Open"])]

    @pytest.mark.parametrize("combine", [True, False])
    def test_combined_and_separate_matching_agree(self, repository, combine):
        source = (
            'def f(x):\n    """Doc\\n"""\n    return x ** 2  # TODO\n'
            '@dec\nclass C: pass\n'
        )
        compiler = LanguageCompiler(repository=repository, combine_rules=combine)
        result = [c.as_tuple() for c in LanguageParser(compiler).parse(source, "python")]
        reference = LanguageCompiler(repository=repository, combine_rules=not combine)
        expected = [c.as_tuple() for c in LanguageParser(reference).parse(source, "python")]
        assert result == expected


class TestCaptureSegmentation:
    def test_overlapping_groups(self, tokens):
        language = Language("g", [Rule(r"(a(b))(c)", {0: "Whole", 1: "Outer", 2: "Inner"})])
        assert tokens("abc", language) == [
            ("a", ["Whole", "Outer"]),
            ("b", ["Whole", "Outer", "Inner"]),
            ("c", ["Whole"]),
        ]

    def test_unmapped_groups_stay_plain(self, tokens):
        language = Language("g", [Rule(r"(def)(\s+)(\w+)", {1: "Keyword", 3: "Function"})])
        assert tokens("def  go", language) == [
            ("def", ["Keyword"]), ("  ", []), ("go", ["Function"]),
        ]

    def test_unparticipating_group_ignored(self, tokens):
        language = Language("g", [Rule(r"(x)?y", {1: "X", 0: "Y"})])
        assert tokens("y xy", language) == [
            ("y", ["Y"]), (" ", []), ("x", ["Y", "X"]), ("y", ["Y"]),
        ]

    def test_lookahead_groups_clipped_to_match(self, tokens):
        language = Language("g", [Rule(r"a(?=(bc))", {0: "A", 1: "Ahead"})])
        assert tokens("abc", language) == [("a", ["A"]), ("bc", [])]

    def test_nested_scope_wraps_region(self, tokens):
        inner = Language("inner", [Rule(r"\\.", "Escape")])
        outer = Language("outer", [
            Rule('"', "Quote", nested_language=inner, end_pattern='"', nested_scope="String"),
        ])
        assert tokens('a"b\\nc"', outer) == [
            ("a", []),
            ('"', ["Quote"]),
            ("b", ["String"]),
            ("\\n", ["String", "Escape"]),
            ("c", ["String"]),
            ('"', ["Quote"]),
        ]


class TestRegions:
    def test_unterminated_region_runs_to_end(self, tokens, caplog):
        inner = Language("inner", [Rule("#", "Tag")])
        outer = Language("outer", [
            Rule('"', "Str", nested_language=inner, end_pattern='"', nested_scope="String"),
        ])
        with caplog.at_level(logging.DEBUG):
            result = tokens('a "bc', outer)
        assert result == [("a ", []), ('"', ["Str"]), ("bc", ["String"])]
        assert "unterminated" in caplog.text

    def test_self_nesting(self, tokens):
        language = Language("parens", [
            Rule(r"\(", "Open", nested_language="parens", end_pattern=r"\)", end_captures="Close"),
        ])
        assert tokens("((a))", language) == [
            ("(", ["Open"]), ("(", ["Open"]), ("a", []), (")", ["Close"]), (")", ["Close"]),
        ]

    def test_depth_bound_on_deep_input(self, parser):
        language = Language("parens", [
            Rule(r"\(", "Open", nested_language="parens", end_pattern=r"\)"),
        ])
        assert len(list(parser.parse("((()))", language, max_depth=3))) == 6
        with pytest.raises(NestingDepthExceededError) as info:
            list(parser.parse("(((())))", language, max_depth=3))
        assert info.value.max_depth == 3
        assert info.value.position == 3

    def test_zero_width_self_activation_is_bounded(self, parser, caplog):
        language = Language("loop", [
            Rule(r"(?=x)", "Z", nested_language="loop", end_pattern="y"),
        ])
        with pytest.raises(NestingDepthExceededError) as info:
            list(parser.parse("x", language, max_depth=5))
        assert info.value.max_depth == 5
        assert info.value.position == 0
        assert info.value.language_stack[0] == "loop"
        assert "Nesting depth 5 exceeded" in caplog.text

    def test_captures_before_failure_are_delivered(self, parser):
        language = Language("parens", [
            Rule(r"\(", "Open", nested_language="parens", end_pattern=r"\)"),
        ])
        sink = ListSink()
        with pytest.raises(NestingDepthExceededError):
            parser.parse_into("ab((", language, sink, max_depth=1)
        assert [c.text for c in sink.captures] == ["ab", "("]

    def test_zero_width_region_closing_without_progress(self, tokens):
        inner = Language("inner", [Rule("b", "B")])
        outer = Language("outer", [
            Rule(r"(?=a)", "Z", nested_language=inner, end_pattern=r"(?=a)"),
        ])
        result = tokens("aab", outer)
        assert "".join(text for text, _ in result) == "aab"
        assert all(scopes == [] for _, scopes in result)


class TestZeroWidth:
    def test_zero_width_match_does_not_stall(self, tokens):
        language = Language("zw", [Rule(r"\b", "Boundary"), Rule("a", "A")])
        assert tokens("ab a", language) == [("ab a", [])]

    def test_zero_width_then_real_match(self, tokens):
        language = Language("zw", [Rule("a", "A"), Rule(r"\b", "Boundary")])
        assert tokens("ab a", language) == [("a", ["A"]), ("b ", []), ("a", ["A"])]


class TestProperties:
    SAMPLES = {
        "python": 'import os\n\n@cache\ndef f(a, *b):\n    """x\\ty"""\n    return a ** 2  # FIXME\n',
        "javascript": "const s = `a${b + {c: 1}.c}`; /* TODO */ let r = /x\\/y/g;\n",
        "html": '<!DOCTYPE html><p class="a">&amp; <b>x</b></p><script>if (a < b) {}</script>'
                '<style>p { color: red; }</style><!-- end',
        "css": "a:hover, .b > #c { margin: -1.5em 0 !important; background: url(x.png); }",
        "json": '{"a": [1, -2.5e3, true, null], "b": "\\"q\\""}',
        "sql": "SELECT a, COUNT(*) FROM t WHERE b = 'it''s' -- c\n",
        "cpp": '#include <vector>\nint main() { auto s = R"d(x)d"; return 0x1F; }\n',
        "markdown": "# Title\n\n```python\nx = 1\n```\n\n* item `code` [a](b)\n",
        "plaintext": "just text\n",
    }

    @pytest.mark.parametrize("language_id", sorted(SAMPLES))
    def test_lossless(self, parser, language_id):
        source = self.SAMPLES[language_id]
        captures = list(parser.parse(source, language_id))
        assert "".join(c.text for c in captures) == source
        assert all(c.text for c in captures)

    @pytest.mark.parametrize("language_id", sorted(SAMPLES))
    def test_deterministic(self, tokens, language_id):
        source = self.SAMPLES[language_id]
        assert tokens(source, language_id) == tokens(source, language_id)

    def test_parse_is_lazy_and_single_pass(self, parser, mini):
        captures = parser.parse("a // b", mini)
        assert next(captures).text == "a "
        assert [c.text for c in captures] == ["// b"]
        assert list(captures) == []

    def test_parse_into_counts(self, parser, mini):
        sink = ListSink()
        assert parser.parse_into("a // b\nc", mini, sink) == 3
        assert [c.text for c in sink.captures] == ["a ", "// b", "\nc"]


class TestPreconditions:
    @pytest.mark.parametrize("source", [None, 42, b"bytes"])
    def test_source_must_be_str(self, parser, source):
        with pytest.raises(PreconditionError) as info:
            parser.parse(source, "python")
        assert info.value.argument == "source_text"

    @pytest.mark.parametrize("language", [None, "", 3.5])
    def test_language_required(self, parser, language):
        with pytest.raises(PreconditionError) as info:
            parser.parse("x", language)
        assert info.value.argument == "language"

    def test_unknown_language(self, parser):
        with pytest.raises(UnknownLanguageError) as info:
            parser.parse("x", "cobol")
        assert isinstance(info.value, LookupError)
        assert isinstance(info.value, PreconditionError)
        assert info.value.language_id == "cobol"

    def test_sink_required(self, parser, mini):
        with pytest.raises(PreconditionError):
            parser.parse_into("x", mini, None)

    @pytest.mark.parametrize("depth", [-1, 1.5, True])
    def test_max_depth_must_be_non_negative_int(self, parser, mini, depth):
        with pytest.raises(PreconditionError):
            parser.parse("x", mini, max_depth=depth)
        with pytest.raises(PreconditionError):
            LanguageParser(parser.compiler, max_depth=depth)

    def test_alias_accepted(self, tokens):
        assert tokens("1", "py") == [("1", ["Number"])]
