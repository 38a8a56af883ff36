# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for documentation field extraction."""

from pathlib import Path

from mqlhelp.extractor import (
    extract,
    extract_description,
    extract_example,
    extract_from_content,
    extract_notes,
    extract_parameters,
    extract_returns,
    extract_syntax,
)
from mqlhelp.model import ExtractedInfo
from mqlhelp.text import strip_html

ORDERSEND_HTML = """<html>
<head><style>body { font: 10pt; }</style></head>
<body>
<h1>OrderSend</h1>
<p>The OrderSend() function is used for executing trade operations.</p>
<p>It sends a request to the trade server.</p>
<pre>bool  OrderSend(
   MqlTradeRequest&amp; request,
   MqlTradeResult&amp;  result
   );</pre>
<p>Parameters</p>
<p>request<br>[in] Pointer to a structure describing the trade action.</p>
<p>Return Value</p>
<p>In case of a successful basic check returns true.</p>
<p>Note: Trade requests go through several stages of checking on the server.</p>
<p>Note: short</p>
<p>Warning: Never send requests in OnInit without checking the connection.</p>
</body>
</html>
"""


def test_ext_001_extracts_every_field_from_reference_page() -> None:
    info = extract_from_content(ORDERSEND_HTML)

    assert info.syntax == (
        "bool OrderSend( MqlTradeRequest& request, MqlTradeResult& result )"
    )
    assert info.parameters == (
        "request\n[in] Pointer to a structure describing the trade action."
    )
    assert info.returns == "In case of a successful basic check returns true."
    assert info.example is not None
    assert info.example.startswith("bool  OrderSend(")
    assert "MqlTradeRequest& request," in info.example
    assert info.notes == [
        "Trade requests go through several stages of checking on the server.",
        "Never send requests in OnInit without checking the connection.",
    ]
    assert info.description == (
        "OrderSend The OrderSend() function is used for executing trade operations."
    )


def test_ext_002_strip_html_keeps_block_structure_and_drops_styles() -> None:
    text = strip_html(ORDERSEND_HTML)

    assert "font" not in text
    assert text.startswith("OrderSend\n\nThe OrderSend() function")
    assert "\n\nParameters\n\nrequest\n[in] Pointer" in text
    assert "\n\n\n" not in text


def test_ext_003_syntax_accepts_virtual_prefix_and_requires_capitalized_name() -> None:
    assert (
        extract_syntax("virtual int Compare(const CObject *node, const int mode=0) const")
        == "virtual int Compare(const CObject *node, const int mode=0)"
    )
    assert extract_syntax("int counter (x)") is None
    assert extract_syntax("plain text without signature") is None
    assert len(extract_syntax("void F(" + "int a," * 60 + ")") or "") == 200


def test_ext_004_localized_parameter_and_return_headers_are_recognized() -> None:
    assert extract_parameters("参数:\n名称 说明\n\n其他") == "名称 说明"
    assert extract_returns("返回值：\n成功返回true") == "成功返回true"
    assert extract_returns("Returns: the ticket number") == "the ticket number"
    assert extract_parameters("no headers at all") is None
    assert extract_returns("no headers at all") is None


def test_ext_005_example_prefers_pre_then_code_then_header() -> None:
    assert extract_example("<code>x = 1;</code><pre>y = 2;</pre>") == "y = 2;"
    assert extract_example("<p>see <code>x = 1;</code></p>") == "x = 1;"
    assert (
        extract_example("Example:\nOrderSend(request, result);")
        == "OrderSend(request, result);"
    )
    assert extract_example("nothing here") is None


def test_ext_006_long_example_is_cut_and_marked() -> None:
    example = extract_example("<pre>" + "x" * 600 + "</pre>")

    assert example == "x" * 500 + "\n// ..."


def test_ext_007_notes_keep_document_order_and_cap_at_three() -> None:
    text = (
        "Warning: first warning text here\n"
        "Note: second note text here\n"
        "Important: third important text\n"
        "Note: fourth note text here"
    )

    assert extract_notes(text) == [
        "first warning text here",
        "second note text here",
        "third important text",
    ]
    assert extract_notes("Note: " + "n" * 200) == ["n" * 150]


def test_ext_008_description_joins_first_two_paragraphs_and_truncates() -> None:
    assert extract_description("First  part.\n\nSecond\npart.\n\nThird.") == (
        "First part. Second part."
    )
    assert extract_description("a" * 400) == "a" * 300
    assert extract_description("") is None


def test_ext_009_unreadable_document_yields_empty_result(tmp_path: Path) -> None:
    info = extract(tmp_path / "missing.htm")

    assert info == ExtractedInfo()
    assert info.notes == []


def test_ext_010_extract_reads_document_from_disk(tmp_path: Path) -> None:
    document = tmp_path / "ordersend.htm"
    document.write_text(ORDERSEND_HTML, encoding="utf-8")

    info = extract(document)

    assert info.returns == "In case of a successful basic check returns true."


def test_ext_011_markup_is_parsed_not_pattern_stripped() -> None:
    markup = "<p>Use <b>OrderSend</b> now</p><script>alert(1)</script>"

    assert strip_html(markup) == "Use OrderSend now"
    assert strip_html("<p>x &amp;&amp; y &lt; 3</p>") == "x && y < 3"


def test_ext_012_nested_tags_inside_code_and_signature_are_flattened() -> None:
    signature = (
        "<p>bool OrderSend(MqlTradeRequest&amp; request, "
        "<i>MqlTradeResult</i>&amp; result)</p>"
    )

    assert extract_example("<pre><span>int</span> x = <b>1</b>;</pre>") == "int x = 1;"
    assert (
        extract_syntax(signature)
        == "bool OrderSend(MqlTradeRequest& request, MqlTradeResult& result)"
    )
