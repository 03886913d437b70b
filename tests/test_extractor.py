"""Tests for rescat.extractor."""

from __future__ import annotations

import textwrap

import pytest

from rescat.errors import ExtractionError
from rescat.extractor import (
    DESCRIPTION_LENGTH,
    EXCERPT_LENGTH,
    MCP_DESCRIPTION,
    MISSING_DESCRIPTION,
    SHELL_DESCRIPTION,
    determine_type,
    extract_category,
    extract_metadata,
    extract_tags,
    generate_slug,
    title_from_file_name,
)
from rescat.models import ResourceExtension, ResourceType

CREATED = "2024-01-01T00:00:00.000Z"


def _extract(relative_path: str, text: str):
    content = textwrap.dedent(text).lstrip("\n")
    return extract_metadata(
        relative_path, content, file_size=len(content.encode("utf-8")), created_at=CREATED
    )


def test_markdown_rule_with_frontmatter() -> None:
    resource = _extract(
        "rules/security/audit.md",
        """
        ---
        title: Audit Tool
        tags: security, audit
        ---
        # Audit Tool
        Run an audit.
        """,
    )

    assert resource.slug == "rule-security-audit"
    assert resource.type is ResourceType.RULE
    assert resource.category == "security"
    assert resource.title == "Audit Tool"
    assert resource.description == "Run an audit."
    assert resource.tags == ("security", "audit")
    assert resource.extension is ResourceExtension.MARKDOWN
    assert resource.file_path == "rules/security/audit.md"
    assert resource.file_name == "audit.md"
    assert resource.created_at == CREATED
    assert resource.frontmatter == {"title": "Audit Tool", "tags": "security, audit"}
    assert resource.excerpt == "# Audit Tool Run an audit."
    assert resource.search_content == (
        "Audit Tool Run an audit. # Audit Tool Run an audit. security audit"
    )


def test_json_mcp_uses_name_and_description() -> None:
    resource = _extract(
        "mcps/db/config.json", '{"name": "db-mcp", "description": "DB connector"}'
    )

    assert resource.type is ResourceType.MCP
    assert resource.category == "db"
    assert resource.slug == "mcp-db-config"
    assert resource.title == "db-mcp"
    assert resource.description == "DB connector"
    assert resource.tags == ()
    assert resource.frontmatter is None


def test_json_without_name_falls_back_to_file_name() -> None:
    resource = _extract("mcps/tools/empty.json", "{}")

    assert resource.title == "empty.json"
    assert resource.description == MCP_DESCRIPTION


@pytest.mark.parametrize("payload", ["{not json", "[1, 2, 3]"])
def test_json_that_is_not_an_object_is_rejected(payload: str) -> None:
    with pytest.raises(ExtractionError):
        _extract("mcps/broken/bad.json", payload)


def test_task_name_takes_precedence_over_heading() -> None:
    resource = _extract(
        "commands/review.md",
        """
        # Heading
        <task name="Code Review">
        Review the pull request.
        </task>
        """,
    )

    assert resource.title == "Code Review"
    assert resource.description == "Review the pull request."
    assert resource.category == "general"
    assert resource.slug == "command-general-review"


def test_title_falls_back_to_file_name() -> None:
    resource = _extract(
        "rules/frontend/react-patterns.mdc",
        """
        ---
        description: React component conventions
        tags:
          - react
          - frontend
        ---
        Prefer function components.
        """,
    )

    assert resource.title == "React Patterns"
    assert resource.description == "React component conventions"
    assert resource.tags == ("react", "frontend")
    assert resource.extension is ResourceExtension.CURSOR_RULE


def test_shell_script_metadata() -> None:
    resource = _extract("hooks/pre-commit/lint-staged.sh", "#!/bin/bash\nnpx lint-staged\n")

    assert resource.type is ResourceType.HOOK
    assert resource.category == "pre-commit"
    assert resource.title == "Lint Staged"
    assert resource.description == SHELL_DESCRIPTION


def test_description_missing_when_body_has_only_headings() -> None:
    resource = _extract("commands/git/empty.md", "# Only A Heading\n\n<note/>\n")

    assert resource.description == MISSING_DESCRIPTION


def test_description_is_truncated() -> None:
    resource = _extract("commands/git/long.md", "x" * 250 + "\n")

    assert resource.description == "x" * DESCRIPTION_LENGTH


def test_excerpt_collapses_whitespace_and_truncates() -> None:
    body = "word\n\n   " * 100
    resource = _extract("commands/git/wordy.md", body)

    assert len(resource.excerpt) <= EXCERPT_LENGTH
    assert "  " not in resource.excerpt
    assert "\n" not in resource.excerpt
    assert resource.excerpt.startswith("word word")


def test_malformed_frontmatter_degrades_to_full_body(caplog: pytest.LogCaptureFixture) -> None:
    resource = _extract(
        "commands/git/broken.md",
        """
        ---
        tags: [unclosed
        ---
        # Broken Header
        Still indexed.
        """,
    )

    assert resource.frontmatter is None
    assert resource.title == "Broken Header"
    assert resource.tags == ()
    assert "front-matter" in caplog.text


def test_unsupported_extension_is_rejected() -> None:
    with pytest.raises(ExtractionError):
        _extract("commands/notes.txt", "hello")


def test_type_markers_are_checked_in_order() -> None:
    assert determine_type("hooks/rules/thing.md") is ResourceType.RULE
    assert determine_type("misc/notes.md") is ResourceType.COMMAND
    assert determine_type("rules.md") is ResourceType.COMMAND


def test_category_defaults_to_general() -> None:
    assert extract_category("rules/top.md", ResourceType.RULE) == "general"
    assert extract_category("misc/notes.md", ResourceType.COMMAND) == "general"
    assert extract_category("nested/rules/style/x.md", ResourceType.RULE) == "style"


def test_slug_replaces_invalid_characters() -> None:
    assert generate_slug(ResourceType.RULE, "My Rules", "Foo_Bar.md") == "rule-my-rules-foo-bar"


def test_title_from_file_name_capitalises_words() -> None:
    assert title_from_file_name("my-cool-rule.md") == "My Cool Rule"


def test_extract_tags_handles_lists_and_strings() -> None:
    assert extract_tags({"tags": [1, "two"]}) == ("1", "two")
    assert extract_tags({"tags": "a, b ,c"}) == ("a", "b", "c")
    assert extract_tags({"tags": 5}) == ()
    assert extract_tags(None) == ()
