"""Static catalog of programming languages and their aliases.

Display names follow GitHub Linguist. Every alias belongs to exactly one
language; the table is built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class Language:
    display_name: str
    aliases: Tuple[str, ...]


LANGUAGES: Tuple[Language, ...] = (
    Language("Bash", ("bash",)),
    Language("C", ("c",)),
    Language("C#", ("csharp", "c#", "cake", "cakescript")),
    Language("C++", ("cpp", "c++")),
    Language("Clojure", ("clojure", "clj")),
    Language("CMake", ("cmake",)),
    Language("CoffeeScript", ("coffeescript", "coffee", "coffee-script")),
    Language("CSS", ("css",)),
    Language("Dart", ("dart",)),
    Language("Dockerfile", ("dockerfile", "containerfile")),
    Language("Elixir", ("elixir",)),
    Language("Erlang", ("erlang",)),
    Language("F#", ("fsharp", "f#")),
    Language("Go", ("go", "golang")),
    Language("Groovy", ("groovy",)),
    Language("Haskell", ("haskell", "hs")),
    Language("HTML", ("html", "xhtml")),
    Language("Java", ("java",)),
    Language("JavaScript", ("javascript", "js", "node")),
    Language("JSON", ("json", "geojson", "jsonl", "topojson")),
    Language("Just", ("just", "justfile")),
    Language("Kotlin", ("kotlin", "kt")),
    Language("Lua", ("lua",)),
    Language("Makefile", ("makefile", "make", "mf", "bsdmake")),
    Language("Markdown", ("markdown", "md", "pandoc")),
    Language("Nix", ("nix", "nixos")),
    Language("Objective-C", ("objective-c", "objc", "obj-c", "objectivec")),
    Language("Objective-C++", ("objective-c++", "objc++", "obj-c++", "objectivec++")),
    Language("OCaml", ("ocaml",)),
    Language("Perl", ("perl", "cperl")),
    Language("PHP", ("php",)),
    Language("PowerShell", ("powershell", "posh", "pwsh")),
    Language("Python", ("python", "py", "python3", "rusthon")),
    Language("R", ("r", "rscript", "splus")),
    Language("Ruby", ("ruby", "rb", "jruby", "macruby", "rake", "rbx")),
    Language("Rust", ("rust", "rs")),
    Language("Sass", ("sass",)),
    Language("Scala", ("scala",)),
    Language("SCSS", ("scss",)),
    Language("Shell", ("shell", "sh", "zsh")),
    Language("SQL", ("sql",)),
    Language("Svelte", ("svelte",)),
    Language("Swift", ("swift",)),
    Language("TOML", ("toml",)),
    Language("TypeScript", ("typescript", "ts")),
    Language("Vue", ("vue",)),
    Language("XML", ("xml",)),
    Language("YAML", ("yaml", "yml")),
)


def _build_alias_map(languages: Tuple[Language, ...]) -> Mapping[str, Language]:
    table: dict[str, Language] = {}
    for language in languages:
        table[language.display_name.lower()] = language
        for alias in language.aliases:
            table[alias.lower()] = language
    return MappingProxyType(table)


_ALIASES = _build_alias_map(LANGUAGES)


def lookup(identifier: str) -> Language | None:
    return _ALIASES.get(identifier.strip().lower())


def canonicalize(identifier: str) -> str:
    """Return the display name for ``identifier``, or ``identifier`` itself if unknown."""
    language = lookup(identifier)
    return language.display_name if language else identifier


def is_known(identifier: str) -> bool:
    return lookup(identifier) is not None


def languages() -> Tuple[Language, ...]:
    return LANGUAGES


__all__ = ["LANGUAGES", "Language", "canonicalize", "is_known", "languages", "lookup"]
