"""
InsightExtractor tests
"""

import pytest

from src.insights import InsightExtractor, InsightRecord, Lexicon, extract_insights


class TestCategoryExtraction:
    """wins / regrets / tasks classification"""

    def test_extracts_english_wins(self):
        transcript = (
            "Today was great! I successfully completed my project. "
            "I feel proud of the work I accomplished."
        )
        insights = extract_insights(transcript)

        assert "I successfully completed my project" in insights.wins
        assert "I feel proud of the work I accomplished" in insights.wins

    def test_extracts_korean_wins(self):
        transcript = "오늘 정말 잘했다. 프로젝트를 성공적으로 완료했고 기분이 좋았다."
        insights = extract_insights(transcript)

        assert len(insights.wins) > 0
        assert any("성공" in win for win in insights.wins)

    def test_extracts_english_regrets(self):
        transcript = (
            "I regret not starting earlier. I wish I had prepared better. "
            "I made a mistake with the timing."
        )
        insights = extract_insights(transcript)

        assert "I regret not starting earlier" in insights.regrets
        assert "I wish I had prepared better" in insights.regrets
        assert "I made a mistake with the timing" in insights.regrets

    def test_extracts_korean_regrets(self):
        insights = extract_insights("늦게 시작한 것이 후회된다. 실수를 했다.")

        assert len(insights.regrets) > 0
        assert any("후회" in regret for regret in insights.regrets)

    def test_extracts_english_tasks(self):
        transcript = (
            "Tomorrow I need to finish the report. I should call the client. "
            "I plan to review the code."
        )
        insights = extract_insights(transcript)

        assert "Tomorrow I need to finish the report" in insights.tasks
        assert "I should call the client" in insights.tasks
        assert "I plan to review the code" in insights.tasks

    def test_extracts_korean_tasks(self):
        transcript = "내일 보고서를 완료해야 한다. 고객에게 전화하자. 코드를 검토할 계획이다."
        insights = extract_insights(transcript)

        assert len(insights.tasks) > 0
        assert any("해야" in task for task in insights.tasks)

    def test_mixed_language_transcript(self):
        transcript = (
            "Today I successfully completed my work. 오늘 프로젝트를 성공적으로 끝냈다. "
            "Tomorrow I need to prepare for the meeting. 내일 회의 준비를 꼭 해야 한다."
        )
        insights = extract_insights(transcript)

        assert any("successfully" in win for win in insights.wins)
        assert any("성공적으로" in win for win in insights.wins)
        assert any("meeting" in task for task in insights.tasks)
        assert any("해야" in task for task in insights.tasks)

    def test_sentence_can_belong_to_several_categories(self):
        sentence = "I accomplished a lot but I regret skipping lunch"
        insights = extract_insights(sentence + ".")

        assert insights.wins == [sentence]
        assert insights.regrets == [sentence]

    def test_original_casing_and_trim_preserved(self):
        insights = extract_insights("   I FINISHED the Marathon today!   ")

        assert insights.wins == ["I FINISHED the Marathon today"]

    def test_splits_on_punctuation_runs(self):
        insights = extract_insights("Wow!!! I completed the whole thing?!...")

        assert insights.wins == ["I completed the whole thing"]


class TestSentenceLengthFloor:
    """Sentences shorter than 10 characters are ignored"""

    def test_short_sentences_are_skipped(self):
        transcript = (
            "Yes. No. Maybe. Today I accomplished a significant project "
            "milestone that took weeks to complete."
        )
        insights = extract_insights(transcript)

        for short in ("Yes", "No", "Maybe"):
            assert short not in insights.wins
        assert any("accomplished" in win for win in insights.wins)

    def test_short_sentence_with_indicator_is_skipped(self):
        # "Success!" holds a win indicator but is only 7 characters long
        assert extract_insights("Success!").wins == []

    def test_nine_character_korean_sentence_is_skipped(self):
        # "오늘 정말 잘했다" is 9 characters after trimming
        assert extract_insights("오늘 정말 잘했다.").wins == []

    def test_ten_character_sentence_is_kept(self):
        assert len("It's great") == 10
        assert extract_insights("It's great!").wins == ["It's great"]


class TestLimits:
    """Output caps"""

    def test_limits_results_to_maximum_counts(self):
        sentence_block = (
            "I accomplished something great today. I regret not doing more. "
            "I need to work harder tomorrow."
        )
        insights = extract_insights(" ".join([sentence_block] * 20))

        assert len(insights.wins) <= 5
        assert len(insights.regrets) <= 5
        assert len(insights.tasks) <= 5
        assert len(insights.keywords) <= 10

    def test_caps_keep_first_occurrences_in_order(self):
        transcript = " ".join(f"I completed milestone number {i}." for i in range(1, 9))
        insights = extract_insights(transcript)

        assert insights.wins == [f"I completed milestone number {i}" for i in range(1, 6)]

    @pytest.mark.parametrize(
        "transcript",
        [
            "",
            "a. b. c.",
            "I regret it. " * 50,
            "완료했다 후회했다 해야 한다. " * 30,
            " ".join(f"word{i}" for i in range(40)),
        ],
    )
    def test_caps_hold_for_any_input(self, transcript):
        insights = extract_insights(transcript)

        assert len(insights.wins) <= 5
        assert len(insights.regrets) <= 5
        assert len(insights.tasks) <= 5
        assert len(insights.keywords) <= 10
        for sentence in insights.wins + insights.regrets + insights.tasks:
            assert sentence.strip() == sentence and sentence


class TestKeywords:
    """Frequency-ranked keyword extraction"""

    def test_extracts_keywords(self):
        transcript = (
            "Today I worked on the important project with React and JavaScript. "
            "The development process was challenging but rewarding."
        )
        keywords = extract_insights(transcript).keywords

        assert "project" in keywords
        assert "react" in keywords
        assert "javascript" in keywords

    def test_filters_out_common_stop_words(self):
        keywords = extract_insights("The quick brown fox jumps over the lazy dog").keywords

        assert "the" not in keywords
        assert "over" not in keywords
        assert keywords == ["quick", "brown", "fox", "jumps", "lazy", "dog"]

    def test_ranks_by_frequency(self):
        keywords = extract_insights("apple banana apple cherry banana apple").keywords

        assert keywords == ["apple", "banana", "cherry"]

    def test_ties_keep_first_occurrence_order(self):
        keywords = extract_insights("delta alpha delta alpha gamma").keywords

        assert keywords == ["delta", "alpha", "gamma"]

    def test_drops_short_and_digit_only_tokens(self):
        keywords = extract_insights("2024 was year 42 ok go 12345 abc abc123").keywords

        assert keywords == ["year", "abc", "abc123"]
        assert all(len(keyword) > 2 for keyword in keywords)
        assert not any(keyword.isdigit() for keyword in keywords)

    def test_punctuation_separates_tokens(self):
        keywords = extract_insights("hello, world! hello-world").keywords

        assert keywords == ["hello", "world"]

    def test_korean_keywords_and_particles(self):
        keywords = extract_insights(
            "프로젝트를 완료했다. 그리고 프로젝트를 발표했다."
        ).keywords

        assert keywords[0] == "프로젝트를"
        assert "완료했다" in keywords
        assert "발표했다" in keywords
        assert "그리고" not in keywords

    def test_single_occurrence_qualifies(self):
        # A token seen once is a keyword; there is no minimum frequency above 1
        assert extract_insights("serendipity").keywords == ["serendipity"]

    def test_caps_at_ten_keywords(self):
        words = [f"topic{chr(ord('a') + i)}" for i in range(15)]
        keywords = extract_insights(" ".join(words)).keywords

        assert keywords == words[:10]


class TestInputHandling:
    """Total over all inputs"""

    @pytest.mark.parametrize("transcript", ["", "   ", "\n\t", "...!!!???"])
    def test_empty_input_returns_empty_record(self, transcript):
        insights = extract_insights(transcript)

        assert insights == InsightRecord()
        assert insights.wins == []
        assert insights.regrets == []
        assert insights.tasks == []
        assert insights.keywords == []

    @pytest.mark.parametrize("transcript", [None, 42, 3.5, b"bytes", ["list"], {"a": 1}])
    def test_non_string_input_is_treated_as_empty(self, transcript):
        assert extract_insights(transcript) == InsightRecord()


class TestCustomLexicon:
    """Lexicon injection"""

    def test_uses_injected_indicators(self):
        lexicon = Lexicon(
            win_indicators=("banana",),
            regret_indicators=(),
            task_indicators=(),
        )
        extractor = InsightExtractor(lexicon)

        insights = extractor.extract("I ate a banana today. I accomplished everything.")

        assert insights.wins == ["I ate a banana today"]
        assert insights.regrets == []
        assert insights.tasks == []

    def test_uses_injected_limits(self):
        lexicon = Lexicon(max_items=2, max_keywords=1, min_sentence_length=0)
        extractor = InsightExtractor(lexicon)

        insights = extractor.extract("Great. Great job. Great work. Great day.")

        assert insights.wins == ["Great", "Great job"]
        assert len(insights.keywords) == 1

    def test_split_sentences(self):
        assert InsightExtractor.split_sentences(" One. Two!! Three?  ") == [
            "One",
            "Two",
            "Three",
        ]
