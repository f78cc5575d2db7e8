# tests/test_ignore.py
import pytest

from repocat.core.ignore import Selector, compile_patterns, load_pattern_file, validate_pattern
from repocat.errors import GlobSyntaxError, PatternFileError
from repocat.models import SelectionRule

# --- Test 1: Pattern validation ---

@pytest.mark.parametrize("pattern", ["", "   ", "!src/*.py", "docs\\"])
def test_validate_pattern_rejects_malformed(pattern):
    with pytest.raises(GlobSyntaxError) as excinfo:
        validate_pattern(pattern)
    # The offending pattern is carried on the error and in its message
    assert excinfo.value.pattern == pattern
    assert repr(pattern) in str(excinfo.value)

def test_validate_pattern_treats_hash_as_literal():
    assert validate_pattern("#notes.md") == "\\#notes.md"

def test_compile_patterns_empty_is_none():
    assert compile_patterns([]) is None

# --- Test 2: Include/exclude selection ---

@pytest.fixture
def txt_not_b():
    return Selector(SelectionRule(include=("*.txt",), exclude=("b/*",)))

def test_include_matches_any_depth(txt_not_b):
    assert txt_not_b.is_included("a.txt") is True
    assert txt_not_b.is_included("b/c.txt") is True
    assert txt_not_b.is_included("a.py") is False

def test_exclude_wins_over_include(txt_not_b):
    assert txt_not_b.is_selected("a.txt") is True
    # matches both *.txt and b/* -> excluded
    assert txt_not_b.is_selected("b/c.txt") is False

def test_no_include_patterns_selects_everything():
    selector = Selector(SelectionRule())
    assert selector.is_selected("src/main.py") is True
    assert selector.is_selected("README.md") is True

def test_directory_exclude_covers_nested_files():
    selector = Selector(SelectionRule(exclude=("node_modules/",)))
    assert selector.is_selected("node_modules/pkg/index.js") is False
    assert selector.is_selected("src/index.js") is True

def test_extra_excludes_and_exact_paths():
    selector = Selector(
        SelectionRule(),
        extra_excludes=["*.log"],
        excluded_paths={"out/context.txt"},
    )
    assert selector.is_selected("app.log") is False
    assert selector.is_selected("out/context.txt") is False
    assert selector.is_selected("out/other.txt") is True

# --- Test 3: Default VCS ignores ---

def test_default_ignores_prune_vcs_directories():
    selector = Selector(SelectionRule())
    assert selector.is_dir_pruned(".git") is True
    assert selector.is_dir_pruned("vendor/lib/.hg") is True
    assert selector.is_dir_pruned("src") is False
    assert selector.is_selected(".git/config") is False

def test_default_ignores_can_be_disabled():
    selector = Selector(SelectionRule(), use_default_ignores=False)
    assert selector.is_dir_pruned(".git") is False
    assert selector.is_selected(".git/config") is True

def test_user_excludes_do_not_prune_directories():
    selector = Selector(SelectionRule(exclude=("build/",)))
    assert selector.is_dir_pruned("build") is False

# --- Test 4: Pattern files ---

def test_load_pattern_file_skips_comments_and_blanks(tmp_path):
    pattern_file = tmp_path / ".gitignore"
    pattern_file.write_text("# build output\n\ndist/\n  *.log  \n", encoding="utf-8")

    assert load_pattern_file(pattern_file) == ["dist/", "*.log"]

def test_load_pattern_file_missing(tmp_path):
    with pytest.raises(PatternFileError) as excinfo:
        load_pattern_file(tmp_path / "nope.txt")
    assert "nope.txt" in str(excinfo.value)
