"""Tests for the Document query layer over BeautifulSoup."""

import pytest

from subsidy_scraper.document import Document

PAGE = """
<html><head>
<script src="/static/app.js"></script>
<script>
  var chartData = [{"year":"2020","spending":1.5}];
  if (a < b) { draw(); }
</script>
</head><body>
<h1>Farm Subsidy <!-- comment --> Database</h1>
<span class="stateface stateface-AL">Alabama</span>
<span class="other">Not this</span>
<table title="Programs included in livestock subsidies">
  <tr><th>Program</th><th>Amount</th></tr>
  <tr><td>Livestock <b>Forage</b></td><td>$1,000</td></tr>
</table>
<table title="Programs included in livestock subsidies (2)"></table>
<div id="empty"></div>
</body></html>
"""


@pytest.fixture
def doc():
    return Document.from_html(PAGE)


class TestFind:
    """Tests for find() and first() with attribute predicates."""

    def test_find_by_tag(self, doc):
        assert len(list(doc.find("span"))) == 2

    def test_find_contains(self, doc):
        spans = list(doc.find("span", "class", contains="stateface"))
        assert len(spans) == 1
        assert spans[0].attr("class") == "stateface stateface-AL"

    def test_find_equals_is_exact(self, doc):
        tables = list(
            doc.find("table", "title", equals="Programs included in livestock subsidies")
        )
        assert len(tables) == 1

    def test_missing_attribute_compares_as_empty(self, doc):
        assert list(doc.find("div", "class", contains="x")) == []
        assert len(list(doc.find("div", "class", equals=""))) == 1

    def test_first_returns_none_when_absent(self, doc):
        assert doc.first("table", "title", equals="Nope") is None

    def test_find_is_lazy(self, doc):
        it = doc.find("script")
        first = next(it)
        assert first.attr("src") == "/static/app.js"

    def test_filter_without_attribute_raises_on_call(self, doc):
        with pytest.raises(ValueError, match="require an attribute"):
            doc.find("span", contains="stateface")

    def test_element_filter_without_attribute_raises_on_call(self, doc):
        table = doc.first("table")
        with pytest.raises(ValueError, match="require an attribute"):
            table.find("td", equals="x")


class TestElement:
    """Tests for per-element accessors."""

    def test_attr_absent_is_empty_string(self, doc):
        span = doc.first("span", "class", contains="stateface")
        assert span.attr("data-missing") == ""

    def test_texts_in_document_order(self, doc):
        table = doc.first("table")
        texts = [t.strip() for t in table.texts() if t.strip()]
        assert texts == ["Program", "Amount", "Livestock", "Forage", "$1,000"]

    def test_texts_skip_comments(self, doc):
        h1 = doc.first("h1")
        assert all("comment" not in t for t in h1.texts())

    def test_script_html_is_verbatim(self, doc):
        scripts = list(doc.find("script"))
        body = scripts[1].html()
        assert 'var chartData = [{"year":"2020","spending":1.5}];' in body
        assert "a < b" in body

    def test_children_by_name(self, doc):
        table = doc.first("table")
        rows = list(table.find("tr"))
        cells = list(rows[1].children(["td", "th"]))
        assert [c.name for c in cells] == ["td", "td"]

    def test_closest_ancestor(self):
        doc = Document.from_html(
            '<table id="outer"><tr><td><table id="inner"><tr><td>x</td></tr>'
            "</table></td></tr></table>"
        )
        rows = list(doc.find("tr"))
        assert rows[0].closest("table").attr("id") == "outer"
        assert rows[1].closest("table").attr("id") == "inner"
        assert doc.first("table").closest("table") is None

    def test_equality_is_node_identity(self):
        doc = Document.from_html("<p>same</p><p>same</p>")
        first, second = doc.find("p")
        assert first == doc.first("p")
        assert first != second
        assert len({first, doc.first("p"), second}) == 2
