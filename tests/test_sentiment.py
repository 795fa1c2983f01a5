import pytest

from study_buddy.services.sentiment import KeywordSentimentAnalyzer, Sentiment

analyzer = KeywordSentimentAnalyzer()


def test_empty_text_is_neutral():
    assert analyzer.score("") == Sentiment(0.0, 0.0)


def test_question_without_polarity_words_is_neutral():
    assert analyzer.score("What is entropy?") == Sentiment(0.0, 0.0)


def test_positive_words_raise_score_and_magnitude():
    assert analyzer.score("I love this, it is great") == Sentiment(0.2, 0.2)


def test_negative_words_lower_score_and_raise_magnitude():
    assert analyzer.score("This is bad and awful") == Sentiment(-0.2, 0.2)


def test_mixed_words_offset_score_but_add_magnitude():
    result = analyzer.score("bad awful day, but a good lecture")

    assert result == Sentiment(-0.1, 0.3)


def test_matching_is_case_insensitive_and_ignores_punctuation():
    assert analyzer.score("GOOD! Great.") == Sentiment(0.2, 0.2)


def test_only_whole_words_count():
    assert analyzer.score("goodness badly unhappy") == Sentiment(0.0, 0.0)


def test_repeated_words_count_every_occurrence():
    assert analyzer.score("happy happy happy") == Sentiment(0.3, 0.3)


def test_score_and_magnitude_are_clamped():
    very_positive = analyzer.score("good " * 30)
    very_negative = analyzer.score("hate " * 15)

    assert very_positive == Sentiment(1.0, 1.0)
    assert very_negative == Sentiment(-1.0, 1.0)


@pytest.mark.parametrize("text", [
    "",
    "   ",
    "I hate hate hate this terrible awful sad angry bad homework " * 5,
    "love like excellent happy great good " * 10,
    "こんにちは 123 !!! ???",
    "mixed good bad good bad good bad",
])
def test_bounds_hold_for_arbitrary_text(text):
    result = analyzer.score(text)

    assert -1.0 <= result.score <= 1.0
    assert 0.0 <= result.magnitude <= 1.0


def test_custom_word_lists():
    custom = KeywordSentimentAnalyzer(positive={"eureka"}, negative={"stuck"})

    assert custom.score("Eureka! but still stuck, stuck") == Sentiment(-0.1, 0.3)
    assert custom.score("good") == Sentiment(0.0, 0.0)
