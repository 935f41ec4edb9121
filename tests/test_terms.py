"""Regression tests for search text normalization and term parsing."""

from app.terms import normalize_search_text, parse_search_terms


def test_parse_empty_text():
    assert parse_search_terms("") == []


def test_single_letters_and_dashes_are_dropped():
    assert parse_search_terms("a b-c") == ["b-c"]
    assert parse_search_terms("- Z x ebook") == ["ebook"]


def test_single_digits_and_non_latin_letters_survive():
    assert parse_search_terms("3 é plugin") == ["3", "é", "plugin"]


def test_quoted_phrase_is_one_term():
    """Exact-match quotes keep the inner space; the stray "c" is noise."""

    assert parse_search_terms('"a b" c') == ["a b"]


def test_quoted_phrase_keeps_edge_spaces():
    assert parse_search_terms('" pro "') == [" pro "]


def test_unquoted_tokens_lose_quote_characters():
    assert parse_search_terms("'theme' \"plugin") == ["theme", "plugin"]
    assert parse_search_terms('""') == []


def test_order_and_duplicates_are_kept():
    assert parse_search_terms("pro  theme pro") == ["pro", "theme", "pro"]


def test_normalize_replaces_punctuation_with_spaces():
    assert normalize_search_text("Pro-Theme, v2!") == "Pro Theme v2"


def test_normalize_keeps_unicode_letters_and_numbers():
    assert normalize_search_text("Café  ½ приложение") == "Café ½ приложение"


def test_normalize_strips_tags_and_handles_missing_input():
    assert normalize_search_text("<b>ebook</b>") == "ebook"
    assert normalize_search_text(None) == ""
    assert normalize_search_text("?!") == ""


def test_normalize_removes_quotes_before_parsing():
    normalized = normalize_search_text('"a b" theme')

    assert normalized == "a b theme"
    assert parse_search_terms(normalized) == ["theme"]
