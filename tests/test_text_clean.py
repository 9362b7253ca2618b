from paperseg.text_clean import (
    ELLIPSIS,
    MAX_CONTENT_LENGTH,
    clean_text,
    format_content,
    normalize_paragraphs,
    normalize_punctuation,
    remove_common_noise,
    truncate_content,
)


def test_clean_text_rejects_non_strings():
    assert clean_text(None) == ""
    assert clean_text(123) == ""
    assert clean_text("") == ""


def test_clean_text_normalizes_whitespace_and_line_endings():
    raw = "  a\t\tb  \r\nc\x07d\r\r\r\r\ne "
    assert clean_text(raw) == "a b\ncd\n\ne"


def test_clean_text_strips_c1_controls():
    assert clean_text("mid\x85dle\x9f") == "middle"


def test_clean_text_is_idempotent():
    samples = [
        "  Title\r\n\r\n\r\n\r\nBody \x0c text here  \n\n\n",
        "a\x1f\tb\n \n \n \nc",
        "摘要：  本文\r研究 。\n\n\n\n1. 引言",
    ]
    for s in samples:
        once = clean_text(s)
        assert clean_text(once) == once


def test_remove_common_noise_drops_page_furniture():
    text = "Page 3\nReal content line here\n12\n.\nab\n第 4 页\nWow!!!!!! yes"
    assert remove_common_noise(text) == "Real content line here\nWow! yes"


def test_normalize_paragraphs():
    assert normalize_paragraphs("First.Second") == "First. Second"
    assert normalize_paragraphs("- item one") == "• item one"
    assert normalize_paragraphs("3.5 times faster") == "3.5 times faster"
    assert normalize_paragraphs("研究完成。本文提出") == "研究完成。\n\n本文提出"


def test_normalize_punctuation():
    assert normalize_punctuation("a ,b") == "a, b"
    assert normalize_punctuation("1,000 items") == "1,000 items"
    assert normalize_punctuation("你好， 世界") == "你好，世界"
    assert normalize_punctuation("end.   Next") == "end. Next"


def test_truncate_prefers_sentence_boundary():
    text = "A" * 1300 + ". " + "b" * 400
    out = truncate_content(text)
    assert out == "A" * 1300 + "."
    assert not out.endswith(ELLIPSIS)


def test_truncate_falls_back_to_space_then_hard_cut():
    near_space = "a" * 1400 + " " + "b" * 300
    assert truncate_content(near_space) == "a" * 1400 + ELLIPSIS

    far_space = "a" * 1000 + " " + "b" * 700
    out = truncate_content(far_space)
    assert out == far_space[:MAX_CONTENT_LENGTH] + ELLIPSIS


def test_truncate_cuts_at_last_comma():
    latin = "a" * 1360 + " " + "a" * 60 + "," + "b" * 300
    assert truncate_content(latin) == "a" * 1360 + " " + "a" * 60 + ELLIPSIS

    cjk = "字" * 1400 + "，" + "词" * 300
    assert truncate_content(cjk) == "字" * 1400 + ELLIPSIS


def test_format_content_length_is_bounded():
    text = "word " * 2000
    out = format_content(text)
    assert len(out) <= MAX_CONTENT_LENGTH + len(ELLIPSIS)


def test_format_content_handles_missing_input():
    assert format_content(None) == ""
    assert format_content("   ") == ""
