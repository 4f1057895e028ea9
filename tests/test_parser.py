"""Unit tests for llmdiff.ops.parser."""

from __future__ import annotations

from llmdiff.ops.model import Create, Delete, Overwrite, Rename, SearchReplace
from llmdiff.ops.parser import extract_payload, parse


# ── TestSingleBlocks ─────────────────────────────────────────────────


class TestSingleBlocks:
    def test_create_content_is_trimmed_interior(self) -> None:
        ops = parse("<<<CREATE: src/a.ts>>>\n\n  console.log(1)\n\n<<<END>>>")
        assert ops == [Create("src/a.ts", "console.log(1)")]

    def test_create_keeps_inner_whitespace(self) -> None:
        ops = parse("<<<CREATE: a.py>>>\ndef f():\n    return 1\n<<<END>>>")
        assert ops[0].content == "def f():\n    return 1"

    def test_create_empty_content(self) -> None:
        assert parse("<<<CREATE: empty.txt>>>\n<<<END>>>") == [Create("empty.txt", "")]

    def test_delete(self) -> None:
        assert parse("<<<DELETE: old/file.ts>>>\n<<<END>>>") == [Delete("old/file.ts")]

    def test_rename(self) -> None:
        ops = parse("<<<RENAME: old/path.ts -> new/path.ts>>>\n<<<END>>>")
        assert ops == [Rename("old/path.ts", "new/path.ts")]

    def test_search_replace(self) -> None:
        text = (
            "<<<FILE: src/app.py>>>\n"
            "<<<SEARCH>>>\n"
            "x = 1\n"
            "<<<REPLACE>>>\n"
            "x = 2\n"
            "<<<END>>>"
        )
        assert parse(text) == [SearchReplace("src/app.py", "x = 1", "x = 2")]

    def test_search_replace_with_empty_replacement(self) -> None:
        text = "<<<FILE: a.py>>>\n<<<SEARCH>>>\nremove me\n<<<REPLACE>>>\n<<<END>>>"
        assert parse(text) == [SearchReplace("a.py", "remove me", "")]

    def test_file_without_search_is_overwrite(self) -> None:
        text = "<<<FILE: README.md>>>\n# New title\n<<<END>>>"
        assert parse(text) == [Overwrite("README.md", "# New title")]

    def test_backslash_paths_are_normalized(self) -> None:
        assert parse("<<<DELETE: src\\old.ts>>>\n<<<END>>>") == [Delete("src/old.ts")]


# ── TestOrdering ─────────────────────────────────────────────────────


class TestOrdering:
    def test_interleaved_kinds_keep_source_order(self) -> None:
        text = "\n".join([
            "Here is the plan.",
            "<<<FILE: b.py>>>",
            "<<<SEARCH>>>",
            "old",
            "<<<REPLACE>>>",
            "new",
            "<<<END>>>",
            "<<<DELETE: c.py>>>",
            "<<<END>>>",
            "<<<CREATE: a.py>>>",
            "print('a')",
            "<<<END>>>",
            "<<<RENAME: d.py -> e.py>>>",
            "<<<END>>>",
            "<<<CREATE: f.py>>>",
            "print('f')",
            "<<<END>>>",
            "Done.",
        ])
        kinds = [op.kind for op in parse(text)]
        assert kinds == ["search-replace", "delete", "create", "rename", "create"]

    def test_surrounding_prose_is_ignored(self) -> None:
        text = "Sure! I'll delete it.\n<<<DELETE: x.txt>>>\n<<<END>>>\nLet me know."
        assert parse(text) == [Delete("x.txt")]


# ── TestMalformed ────────────────────────────────────────────────────


class TestMalformed:
    def test_no_blocks_yields_empty_list(self) -> None:
        assert parse("Nothing to see here.") == []

    def test_unterminated_block_is_dropped(self) -> None:
        assert parse("<<<CREATE: a.py>>>\nprint(1)\n") == []

    def test_unterminated_block_does_not_swallow_the_next_one(self) -> None:
        text = "<<<CREATE: a.py>>>\nprint(1)\n<<<DELETE: b.py>>>\n<<<END>>>"
        assert parse(text) == [Delete("b.py")]

    def test_missing_end_between_two_good_blocks(self) -> None:
        text = (
            "<<<DELETE: a.py>>>\n<<<END>>>\n"
            "<<<RENAME: x.py -> y.py>>>\n"
            "<<<CREATE: c.py>>>\nc\n<<<END>>>"
        )
        assert parse(text) == [Delete("a.py"), Create("c.py", "c")]

    def test_rename_without_arrow_is_dropped_and_next_block_kept(self) -> None:
        text = "<<<RENAME: only-one-path>>>\n<<<END>>>\n<<<DELETE: b.py>>>\n<<<END>>>"
        assert parse(text) == [Delete("b.py")]

    def test_search_without_replace_is_dropped(self) -> None:
        text = "<<<FILE: a.py>>>\n<<<SEARCH>>>\nx\n<<<END>>>\n<<<DELETE: b.py>>>\n<<<END>>>"
        assert parse(text) == [Delete("b.py")]

    def test_empty_search_is_dropped(self) -> None:
        text = "<<<FILE: a.py>>>\n<<<SEARCH>>>\n\n<<<REPLACE>>>\ny\n<<<END>>>"
        assert parse(text) == []

    def test_empty_path_is_dropped(self) -> None:
        assert parse("<<<DELETE: >>>\n<<<END>>>") == []

    def test_search_not_at_start_of_file_body_is_dropped(self) -> None:
        text = "<<<FILE: a.py>>>\nstray\n<<<SEARCH>>>\nx\n<<<REPLACE>>>\ny\n<<<END>>>"
        assert parse(text) == []


# ── TestFencedPayload ────────────────────────────────────────────────


class TestFencedPayload:
    def test_single_fence_interior_is_used(self) -> None:
        text = "Intro\n```\n<<<DELETE: a.py>>>\n<<<END>>>\n```\nOutro"
        assert parse(text) == [Delete("a.py")]

    def test_info_string_is_dropped(self) -> None:
        text = "```text\n<<<DELETE: a.py>>>\n<<<END>>>\n```"
        assert extract_payload(text) == "<<<DELETE: a.py>>>\n<<<END>>>\n"

    def test_fence_without_header_is_not_a_wrapper(self) -> None:
        text = "```text\nbody\n```"
        assert extract_payload(text) == text

    def test_no_fence_returns_text_unchanged(self) -> None:
        assert extract_payload("plain") == "plain"

    def test_multiple_fences_scan_whole_text(self) -> None:
        text = (
            "```\n<<<DELETE: a.py>>>\n<<<END>>>\n```\n"
            "```\n<<<DELETE: b.py>>>\n<<<END>>>\n```\n"
        )
        assert parse(text) == [Delete("a.py"), Delete("b.py")]

    def test_fence_inside_created_markdown_is_preserved(self) -> None:
        text = (
            "<<<CREATE: docs/x.md>>>\n"
            "```python\nprint(1)\n```\n"
            "<<<END>>>"
        )
        ops = parse(text)
        assert ops == [Create("docs/x.md", "```python\nprint(1)\n```")]
