"""Unit tests for changed-file classification."""

from __future__ import annotations

import pytest

from prrompt.classifier import classify, is_prompt_file
from prrompt.config import DEFAULT_PROMPT_PATTERNS


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("prompts/review.md", True),
        ("prompts/nested/deep/file.txt", True),
        (".claude/skills/commit/SKILL.md", True),
        ("src/prompts/review.md", False),
        ("prompts.md", False),
        (".claude/settings.json", False),
        ("README.md", False),
    ],
)
def test_is_prompt_file_uses_prefix_match(path: str, expected: bool) -> None:
    assert is_prompt_file(path, DEFAULT_PROMPT_PATTERNS) is expected


def test_patterns_are_not_globs() -> None:
    assert not is_prompt_file("prompts/a.md", ["prompts/*.md"])
    assert is_prompt_file("prompts/*.md", ["prompts/*.md"])


def test_classify_preserves_order() -> None:
    changed = [
        "src/app.py",
        "prompts/b.md",
        "docs/index.md",
        ".claude/skills/a/SKILL.md",
        "prompts/a.md",
    ]

    prompt_files, other_files = classify(changed, DEFAULT_PROMPT_PATTERNS)

    assert prompt_files == ["prompts/b.md", ".claude/skills/a/SKILL.md", "prompts/a.md"]
    assert other_files == ["src/app.py", "docs/index.md"]


def test_classify_drops_blank_entries() -> None:
    changed = ["", "   ", "prompts/a.md", "\t", "src/app.py", ""]

    prompt_files, other_files = classify(changed, DEFAULT_PROMPT_PATTERNS)

    assert prompt_files == ["prompts/a.md"]
    assert other_files == ["src/app.py"]


def test_classify_partitions_exactly() -> None:
    changed = [f"prompts/{i}.md" if i % 3 == 0 else f"src/{i}.py" for i in range(30)]

    prompt_files, other_files = classify(changed, DEFAULT_PROMPT_PATTERNS)

    assert sorted(prompt_files + other_files) == sorted(changed)
    assert not set(prompt_files) & set(other_files)


def test_classify_with_no_patterns_marks_everything_other() -> None:
    prompt_files, other_files = classify(["prompts/a.md", "src/b.py"], [])

    assert prompt_files == []
    assert other_files == ["prompts/a.md", "src/b.py"]


def test_classify_empty_input() -> None:
    assert classify([], DEFAULT_PROMPT_PATTERNS) == ([], [])
