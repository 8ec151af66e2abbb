import threading

import pytest

from conftest import KEYWORD_DEFINITION, assert_partition, make_registry

from sidel.highlighter import LanguageRegistry, PLAIN_LANGUAGE, Span
from sidel.highlighter.registry import builtin_resources
from sidel.highlighter.rules import compile_language
from sidel.settings.config import DEFAULT_COLOR, SidelConfig, syntax_resource_name
from sidel.settings.definitions import DefinitionLoader
from sidel.settings.resources import (
    DirectoryResources,
    LayeredResources,
    MemoryResources,
    PackageResources,
)


def test_resolve_language_by_extension(registry):
    assert registry.resolve_language("main.mini") == "mini"
    assert registry.resolve_language("lib.MN") == "mini"
    assert registry.resolve_language("notes.txt") is None
    assert registry.resolve_language("README") is None


def test_compiled_language_is_cached(registry):
    assert not registry.is_cached("mini")
    first = registry.get_compiled_language("mini")
    second = registry.get_compiled_language("mini")
    assert first is second
    assert registry.is_cached("mini")


def test_concurrent_first_requests_share_one_instance(registry):
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(registry.get_compiled_language("mini"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_unknown_file_renders_in_default_color(registry):
    compiled = registry.language_for_file("notes.txt")
    assert compiled.name == PLAIN_LANGUAGE
    assert compiled.rules == ()
    assert registry.highlight("let x", compiled) == [Span(0, 5, DEFAULT_COLOR)]


def test_language_without_definition_renders_in_default_color(registry):
    compiled = registry.get_compiled_language("nonexistent")
    assert compiled.is_fallback
    assert registry.highlight("fn", compiled) == [Span(0, 2, DEFAULT_COLOR)]


def test_broken_definition_falls_back(registry):
    compiled = registry.language_for_file("thing.brk")
    assert compiled.name == "broken"
    assert compiled.is_fallback
    assert compiled.rules == ()
    assert compiled.warnings
    assert registry.highlight("fn let", compiled) == [Span(0, 6, DEFAULT_COLOR)]


def test_highlight_file(registry):
    spans = registry.highlight_file("a.mini", "fn main")
    assert spans == [Span(0, 2, "#C586C0"), Span(2, 7, "#D4D4D4")]


def test_registries_are_isolated():
    first = make_registry({"mini": KEYWORD_DEFINITION})
    second = make_registry({"mini": 'default_color = "#000000"\n'})
    assert first.get_compiled_language("mini").default_color == "#D4D4D4"
    assert second.get_compiled_language("mini").default_color == "#000000"


def test_sidel_language_is_always_registered(registry):
    assert "sidel" in registry.languages()
    assert registry.resolve_language("rust.sidel") == "sidel"

    compiled = registry.language_for_file("rust.sidel")
    assert not compiled.is_fallback
    assert compiled.warnings == ()


def test_sidel_language_highlights_definition_source(registry):
    text = 'default_color = "#D4D4D4" # base\n[[rule]]\npriority = 10\n'
    compiled = registry.get_compiled_language("sidel")
    spans = registry.highlight(text, compiled)
    assert_partition(text, spans)

    colors = {text[span.start:span.end]: span.color for span in spans}
    assert colors["default_color"] == "#9CDCFE"
    assert colors['"#D4D4D4"'] == "#4EC9B0"
    assert colors["# base"] == "#6A9955"
    assert colors["[[rule]]"] == "#569CD6"
    assert colors["10"] == "#B5CEA8"


def test_hash_inside_string_is_not_a_comment(registry):
    text = 'name = "a # b"'
    spans = registry.highlight(text, registry.get_compiled_language("sidel"))
    assert Span(7, 14, "#CE9178") in spans


def test_user_definition_overrides_builtin_sidel():
    registry = make_registry({"sidel": 'default_color = "#123456"\n'})
    compiled = registry.get_compiled_language("sidel")
    assert compiled.default_color == "#123456"
    assert compiled.rules == ()


def test_missing_manifest_still_registers_sidel():
    registry = LanguageRegistry(MemoryResources({}), SidelConfig())
    assert registry.languages() == ["sidel"]
    assert registry.manifest.resolve("rs") is None


def test_corrupt_manifest_yields_no_languages_but_sidel():
    registry = make_registry(manifest="[[language]\n")
    assert registry.languages() == ["sidel"]
    assert registry.manifest.errors


def test_preload_compiles_every_language(registry):
    registry.preload()
    for name in registry.languages():
        assert registry.is_cached(name)


def test_get_compiled_language_without_id_is_plain(registry):
    assert registry.get_compiled_language(None).name == PLAIN_LANGUAGE
    assert registry.get_compiled_language("").name == PLAIN_LANGUAGE


def test_registry_uses_configured_match_timeout():
    registry = make_registry({"mini": KEYWORD_DEFINITION}, match_timeout=1.5)
    assert registry.config.match_timeout == 1.5


def test_directory_resources_override_bundled(tmp_path):
    syntax_dir = tmp_path / "syntax"
    syntax_dir.mkdir()
    (syntax_dir / "python.sidel").write_text(KEYWORD_DEFINITION, encoding="utf-8")
    (tmp_path / "flat.sidel").write_text('default_color = "#000000"\n', encoding="utf-8")

    registry = LanguageRegistry(config=SidelConfig(user_syntax_dirs=(tmp_path,)))

    python = registry.language_for_file("script.py")
    assert [rule.name for rule in python.rules] == ["Keyword"]

    rust = registry.language_for_file("main.rs")
    assert not rust.is_fallback
    assert len(rust.rules) > 1

    flat = DirectoryResources(tmp_path).get_text(syntax_resource_name("flat"))
    assert flat == 'default_color = "#000000"\n'


def test_user_manifest_replaces_bundled_manifest(tmp_path):
    (tmp_path / "manifest.toml").write_text(
        '[[language]]\nname = "mini"\nextensions = ["rs"]\n', encoding="utf-8"
    )
    registry = LanguageRegistry(config=SidelConfig(user_syntax_dirs=(tmp_path,)))
    assert registry.resolve_language("main.rs") == "mini"
    assert registry.resolve_language("main.py") is None


def test_directory_resources_missing_root(tmp_path):
    store = DirectoryResources(tmp_path / "absent")
    assert store.get_text("manifest.toml") is None
    assert store.names() == []


def test_layered_resources_first_layer_wins():
    layered = LayeredResources(
        [MemoryResources({"a": "first"}), MemoryResources({"a": "second", "b": "only"})]
    )
    assert layered.get_text("a") == "first"
    assert layered.get_text("b") == "only"
    assert layered.get_text("c") is None
    assert layered.names() == ["a", "b"]


def test_bundled_manifest_languages():
    registry = LanguageRegistry(config=SidelConfig())
    assert registry.manifest.errors == []
    assert registry.resolve_language("main.rs") == "rust"
    assert registry.resolve_language("app.py") == "python"
    assert registry.resolve_language("index.html") == "html"


@pytest.mark.parametrize(
    "filename, language",
    [
        ("hello.bf", "brainfuck"),
        ("hello.b", "brainfuck"),
        ("kernel.HC", "holyc"),
        ("cat.lols", "lolcode"),
        ("quine.befunge", "befunge93"),
        ("quine.be", "befunge93"),
        ("fizz.b98", "befunge98"),
        ("prog.3i", "intercal"),
        ("prog.i", "intercal"),
        ("hello.ook", "ook"),
        ("souffle.chef", "chef"),
        ("hello.unl", "unlambda"),
        ("hello.arnoldc", "arnoldc"),
        ("main.pygyat", "pygyat"),
    ],
)
def test_bundled_manifest_esoteric_languages(filename, language):
    registry = LanguageRegistry(config=SidelConfig())
    assert registry.resolve_language(filename) == language
    compiled = registry.get_compiled_language(language)
    assert not compiled.is_fallback
    assert compiled.rules


def test_brainfuck_commands_are_colored():
    registry = LanguageRegistry(config=SidelConfig())
    compiled = registry.language_for_file("add.bf")
    text = "add [->+<]"
    spans = registry.highlight(text, compiled)
    assert_partition(text, spans)
    assert spans[0] == Span(0, 4, compiled.default_color)
    assert {span.color for span in spans[1:]} != {compiled.default_color}


def _bundled_languages():
    return sorted(
        name[len("syntax/"):-len(".sidel")]
        for name in PackageResources().names()
        if name.startswith("syntax/") and name.endswith(".sidel")
    )


@pytest.mark.parametrize("language", _bundled_languages())
def test_bundled_definitions_compile_cleanly(language):
    definition = DefinitionLoader(PackageResources()).load(language)
    assert not definition.is_fallback
    compiled = compile_language(definition)
    assert compiled.warnings == ()
    assert compiled.rules


def test_builtin_sidel_definition_compiles_cleanly():
    definition = DefinitionLoader(builtin_resources()).load("sidel")
    compiled = compile_language(definition)
    assert compiled.warnings == ()
    assert len(compiled.rules) == 8
