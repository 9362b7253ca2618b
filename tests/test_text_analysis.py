from paperseg.text_analysis import (
    assess_text_quality,
    calculate_similarity,
    extract_keywords,
    extract_words,
    is_stop_word,
)


def test_extract_keywords_ranks_by_frequency():
    assert extract_keywords("the the cat cat cat dog", 2) == ["cat", "dog"]


def test_extract_keywords_skips_digits_and_short_tokens():
    assert extract_keywords("2024 2024 model model x", 5) == ["model"]


def test_extract_keywords_chinese():
    assert extract_keywords("研究 研究 方法 的 的", 2) == ["研究", "方法"]


def test_extract_keywords_invalid_input():
    assert extract_keywords(None) == []
    assert extract_keywords("") == []


def test_stop_words():
    assert is_stop_word("The")
    assert is_stop_word("因为")
    assert not is_stop_word("segment")
    assert extract_words("The method, and THE results!") == ["method", "results"]


def test_calculate_similarity_jaccard():
    assert calculate_similarity("a b c", "b c d") == 0.5
    assert calculate_similarity("same words", "same words") == 1.0


def test_calculate_similarity_empty():
    assert calculate_similarity("", "text") == 0.0
    assert calculate_similarity(None, "text") == 0.0
    assert calculate_similarity("the", "and") == 0.0


def test_quality_of_good_text():
    text = (
        "This study presents a segmentation method for papers. "
        "The results show stable behaviour across many documents."
    )
    report = assess_text_quality(text)
    assert report.score == 100
    assert report.issues == []
    assert report.sentence_count == 2
    assert report.english_ratio > 0.8


def test_quality_of_short_text():
    report = assess_text_quality("Hi there")
    assert report.score == 50
    assert report.issues == ["text is too short", "too few sentences"]


def test_quality_penalizes_repetition():
    report = assess_text_quality("data " * 60)
    assert "too much repeated content" in report.issues
    assert report.score == 60
    assert report.unique_word_count == 1


def test_quality_penalizes_symbol_soup():
    report = assess_text_quality("1234567890 " * 10)
    assert "too few meaningful characters" in report.issues


def test_quality_invalid_input():
    report = assess_text_quality(None)
    assert report.score == 0
    assert report.issues
    assert report.word_count == 0
