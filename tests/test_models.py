import pytest

from paperscrape.models import EntityDraft, PubType, is_empty, pub_type_from_label
from paperscrape.text import flip_bibtex_name, join_authors, normalize_title, titles_match


def test_set_value_marks_written():
    draft = EntityDraft()
    draft.set_value("title", "  Attention Is All You Need ")
    assert draft.title == "Attention Is All You Need"
    assert draft.written == {"title"}


def test_set_value_skips_empty_values():
    draft = EntityDraft(title="Keep")
    draft.set_value("title", "   ")
    draft.set_value("year", None)
    assert draft.title == "Keep"
    assert draft.written == set()


def test_set_value_coerces_year_and_pub_type():
    draft = EntityDraft()
    draft.set_value("year", 2017)
    draft.set_value("pub_type", 1)
    assert draft.year == "2017"
    assert draft.pub_type is PubType.CONFERENCE


def test_set_value_rejects_unknown_field():
    with pytest.raises(AttributeError):
        EntityDraft().set_value("abstract", "x")


def test_copy_is_independent_and_resets_written():
    draft = EntityDraft(title="T", tags={"a"}, provenance={"title": 3})
    draft.set_value("year", "2020")

    copied = draft.copy()
    copied.tags.add("b")
    copied.provenance["year"] = 1

    assert copied.tags == {"a", "b"}
    assert draft.tags == {"a"}
    assert "year" not in draft.provenance
    assert copied.written == set()
    assert draft.written == {"year"}


def test_dict_roundtrip_keeps_pub_type_numbering():
    draft = EntityDraft(title="T", year="2017", pub_type=PubType.BOOK, tags={"x"})
    data = draft.to_dict()
    assert data["pub_type"] == 3
    assert data["tags"] == ["x"]
    assert EntityDraft.from_dict(data) == draft


def test_from_dict_accepts_legacy_keys():
    draft = EntityDraft.from_dict(
        {"title": "T", "pubType": 0, "mainURL": "/papers/t.pdf", "year": 2001, "rating": 5}
    )
    assert draft.pub_type is PubType.JOURNAL
    assert draft.source_path == "/papers/t.pdf"
    assert draft.year == "2001"


@pytest.mark.parametrize(
    "label,expected",
    [
        ("article-journal", PubType.JOURNAL),
        ("Journal Articles", PubType.JOURNAL),
        ("paper-conference", PubType.CONFERENCE),
        ("Conference and Workshop Papers", PubType.CONFERENCE),
        ("book", PubType.BOOK),
        ("dataset", PubType.OTHER),
        (None, PubType.OTHER),
    ],
)
def test_pub_type_from_label(label, expected):
    assert pub_type_from_label(label) is expected


def test_is_empty():
    assert is_empty(None)
    assert is_empty(" ")
    assert is_empty(set())
    assert not is_empty(PubType.JOURNAL)
    assert not is_empty("x")


def test_normalize_title():
    assert normalize_title("Attention Is  All You Need!") == "attention is all you need"
    assert normalize_title("Tom &amp; Jerry: A Study") == "tom jerry a study"
    assert normalize_title(None) == ""


def test_titles_match_ignores_case_and_punctuation():
    assert titles_match("Attention is All you Need.", "Attention Is All You Need")
    assert not titles_match("", "")
    assert not titles_match("Attention", "Attention Is All You Need")


def test_author_helpers():
    assert flip_bibtex_name("Vaswani, Ashish") == "Ashish Vaswani"
    assert flip_bibtex_name("Ashish Vaswani") == "Ashish Vaswani"
    assert join_authors(["A", " ", "B "]) == "A, B"
