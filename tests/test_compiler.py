import re
import threading
import time

import pytest

from codecolor.core.compiler import CompiledLanguageCache, LanguageCompiler, _isolate_groups
from codecolor.core.errors import GrammarError, UnknownLanguageError
from codecolor.core.models import Language, Rule
from codecolor.core.parser import LanguageParser
from codecolor.languages import LanguageRepository


def _tuples(compiler, source, language):
    return [c.as_tuple() for c in LanguageParser(compiler=compiler).parse(source, language)]


class TestGrammarErrors:
    @pytest.mark.parametrize("rule", [
        Rule("(", "X"),
        Rule("", "X"),
        Rule("a", {1: "X"}),
        Rule("a", {"name": "X"}),
        Rule("a", {True: "X"}),
        Rule("a", "Bad..Scope"),
        Rule("a", "X", end_pattern="b"),
        Rule("a", "X", nested_scope="Y"),
        Rule("a", "X", nested_language="comment"),
        Rule("a", "X", nested_language="missing", end_pattern="b"),
        Rule("a", "X", nested_language="comment", end_pattern="("),
    ])
    def test_malformed_rule(self, compiler, rule):
        language = Language("broken", [Rule("ok", "Fine"), rule])
        with pytest.raises(GrammarError) as info:
            compiler.compile(language)
        assert info.value.language_id == "broken"
        assert info.value.rule_index == 1

    def test_rule_repeating_an_earlier_one(self, compiler):
        language = Language("dup", [Rule("a", "A"), Rule("b", "B"), Rule("a", "C")])
        with pytest.raises(GrammarError) as info:
            compiler.compile(language)
        assert info.value.rule_index == 2
        assert "rule 0 has the same pattern" in str(info.value)

    def test_same_pattern_with_other_flags(self, compiler):
        language = Language("flags", [Rule("a", "A"), Rule("a", "B", flags=re.IGNORECASE)])
        assert len(compiler.compile(language).rules) == 2

    def test_error_raised_before_scanning(self, parser):
        language = Language("broken", [Rule("(", "X")])
        with pytest.raises(GrammarError):
            parser.parse("text", language)

    def test_error_in_reachable_language(self, parser):
        inner = Language("inner", [Rule("[", "X")])
        outer = Language("outer", [Rule("<", "T", nested_language=inner, end_pattern=">")])
        with pytest.raises(GrammarError) as info:
            parser.parse("no tags here", outer)
        assert info.value.language_id == "inner"

    def test_two_languages_sharing_an_id(self, parser):
        impostor = Language("outer", [Rule("x", "X")])
        outer = Language("outer", [Rule("<", "T", nested_language=impostor, end_pattern=">")])
        with pytest.raises(GrammarError):
            parser.parse("<x>", outer)


class TestCombinedPattern:
    def test_groups_are_relocated(self, compiler):
        language = Language("groups", [
            Rule(r"(a)(b)", {1: "A", 2: "B"}),
            Rule(r"(c)(d)", {2: "D"}),
        ])
        compiled = compiler.compile(language)
        assert compiled.is_combined
        assert [r.group_offset for r in compiled.rules] == [1, 4]
        assert compiled.combined.groups == 6

    def test_backreferences_survive_combination(self, compiler):
        language = Language("refs", [
            Rule(r"(x)(y)", {1: "X"}),
            Rule(r"(['\"]).*?\1", "Quoted"),
            Rule(r"(?P<tag>\w+)=(?P=tag)", {"tag": "Tag"}),
        ])
        compiler.repository.register(language)
        source = "xy 'a\"b' \"c\" k=k k=j"
        combined = _tuples(compiler, source, language)
        separate = _tuples(LanguageCompiler(compiler.repository, combine_rules=False), source, language)
        assert combined == separate
        assert ("'a\"b'", ["Quoted"]) in combined
        assert ("k", ["Tag"]) in combined

    def test_leading_inline_flags(self, compiler, tokens):
        language = Language("flags", [Rule("x", "X"), Rule(r"(?i)select", "Keyword")])
        compiler.repository.register(language)
        assert compiler.compile(language).is_combined
        assert tokens("SELECT x", language) == [
            ("SELECT", ["Keyword"]), (" ", []), ("x", ["X"]),
        ]

    def test_scoped_flags_do_not_leak(self, repository, tokens):
        language = Language("scoped", [
            Rule("abc", "Upper", flags=re.IGNORECASE),
            Rule("def", "Lower"),
        ])
        repository.register(language)
        assert tokens("ABC DEF def", language) == [
            ("ABC", ["Upper"]), (" DEF ", []), ("def", ["Lower"]),
        ]

    def test_backreference_after_a_hundred_groups(self, compiler):
        filler = [Rule(f"(x)q{i}", "Filler") for i in range(100)]
        language = Language("many", filler + [Rule(r"(['\"]).*?\1", "String")])
        compiler.repository.register(language)
        source = "'abc' \"d\""
        combined = _tuples(compiler, source, language)
        separate = _tuples(LanguageCompiler(compiler.repository, combine_rules=False), source, language)
        compiled = compiler.get_or_build("many")
        assert compiled.is_combined
        assert compiled.rules[-1].group_offset == 201
        assert combined == separate
        assert combined == [("'abc'", ["String"]), (" ", []), ('"d"', ["String"])]

    def test_conditional_and_octal_after_many_groups(self, compiler):
        filler = [Rule(f"(x)q{i}", "Filler") for i in range(60)]
        language = Language("cond", filler + [
            Rule(r"\101\102", "Octal"),
            Rule(r"(<)?\w+(?(1)>)", "Tag"),
        ])
        compiler.repository.register(language)
        source = "<ab> AB"
        combined = _tuples(compiler, source, language)
        separate = _tuples(LanguageCompiler(compiler.repository, combine_rules=False), source, language)
        assert combined == separate
        assert combined == [("<ab>", ["Tag"]), (" ", []), ("AB", ["Octal"])]

    def test_groups_named_per_rule(self):
        assert _isolate_groups(r"(a)(?P<n>b)\2\1[\1]", 3, {2: "n"}) == (
            r"(?P<g3_1>a)(?P<r3_n>b)(?P=r3_n)(?P=g3_1)[\1]"
        )

    def test_character_classes_left_alone(self, compiler):
        language = Language("classes", [Rule(r"(a)", "A"), Rule(r"[\1(?P<n>]+", "Class")])
        compiled = compiler.compile(language)
        assert compiled.combined.search("(?P<n>").group(0) == "(?P<n>"

    def test_builtin_languages_compile_combined(self, compiler, repository):
        for language in repository.all():
            if language.rules:
                assert compiler.get_or_build(language.id).is_combined


class TestCompiledLanguageCache:
    def test_concurrent_first_use_builds_once(self, compiler):
        cache = CompiledLanguageCache()
        calls = []
        barrier = threading.Barrier(16)
        results = []

        def builder():
            calls.append(1)
            time.sleep(0.05)
            return compiler.compile(Language("slow", [Rule("a", "A")]))

        def worker():
            barrier.wait()
            results.append(cache.get_or_build("slow", builder))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 16
        assert all(result is results[0] for result in results)
        assert cache.build_count == 1

    def test_compiler_shares_one_build_across_threads(self, compiler):
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(compiler.get_or_build("python"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result is results[0] for result in results)
        assert compiler.cache.build_count == 1

    def test_builder_failure_is_not_cached(self):
        cache = CompiledLanguageCache()

        def failing():
            raise GrammarError("x", "broken")

        with pytest.raises(GrammarError):
            cache.get_or_build("x", failing)
        assert "x" not in cache
        assert cache.build_count == 0

    def test_invalidation_during_build_discards_result(self, compiler):
        cache = CompiledLanguageCache()
        artifact = compiler.compile(Language("x", [Rule("a", "A")]))

        def builder():
            cache.invalidate("x")
            return artifact

        assert cache.get_or_build("x", builder) is artifact
        assert "x" not in cache

    def test_replacement_after_lookup_is_built(self, repository, monkeypatch):
        repository.register(Language("lang", [Rule("a", "Old")]))
        compiler = LanguageCompiler(repository=repository)
        lookup = repository.get
        replaced = []

        def get_then_replace(language_id):
            language = lookup(language_id)
            if not replaced:
                replaced.append(language_id)
                repository.register(Language("lang", [Rule("a", "New")]))
            return language

        monkeypatch.setattr(repository, "get", get_then_replace)
        compiler.get_or_build("lang")
        assert _tuples(compiler, "a", "lang") == [("a", ["New"])]

    def test_clear(self, compiler):
        compiler.prewarm(["python", "json"])
        assert sorted(compiler.cache.language_ids()) == ["json", "python"]
        compiler.cache.clear()
        assert len(compiler.cache) == 0


class TestLanguageCompiler:
    def test_get_or_build_caches(self, compiler):
        first = compiler.get_or_build("python")
        assert compiler.get_or_build("py") is first
        assert compiler.cache.get("python") is first

    def test_unknown_language(self, compiler):
        with pytest.raises(UnknownLanguageError):
            compiler.get_or_build("cobol")

    def test_reregistering_invalidates(self, compiler, repository):
        old = compiler.get_or_build("json")
        replacement = Language("json", [Rule(r"\d+", "Number")])
        repository.register(replacement)
        new = compiler.get_or_build("json")
        assert new is not old
        assert new.language is replacement

    def test_uncompiled_languages_are_not_cached(self):
        repository = LanguageRepository()
        repository.register(Language("adhoc", [Rule("a", "A")]), compiled=False)
        compiler = LanguageCompiler(repository=repository)
        compiled = compiler.get_or_build("adhoc")
        assert not compiled.is_combined
        assert "adhoc" not in compiler.cache

    def test_prewarm_defaults_to_all_compiled(self, compiler, repository):
        built = compiler.prewarm()
        assert {c.id for c in built} == set(repository.ids())

    def test_unregistered_language_compiled_directly(self, compiler, mini):
        closure = compiler.compile_closure(mini)
        assert set(closure) == {"mini"}
        assert "mini" not in compiler.cache

    def test_closure_follows_nested_references(self, compiler, repository):
        closure = compiler.compile_closure(repository.get("html"))
        assert {"html", "html-tag", "javascript", "javascript-template",
                "css", "css-block", "comment"} <= set(closure)

    def test_inherited_end_captures_only_for_existing_groups(self, compiler):
        language = Language("inherit", [
            Rule(r"(<)(\w+)", {1: "Open", 2: "Name"}, nested_language="comment",
                 end_pattern=r">"),
        ])
        rule = compiler.compile(language, combine=False).rules[0]
        assert rule.end_scopes == ()
