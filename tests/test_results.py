import json

from conftest import make_question, make_quiz
from quiz_player.core.models import QuestionType
from quiz_player.core.results import (
    NO_ANSWER_TEXT,
    QuestionReviewer,
    ResultsPresenter,
    ReviewStatus,
    grade_letter,
    parse_user_matches,
    review_status,
)
from quiz_player.core.schemas import CorrectAnswer, QuestionResult, SubmissionResult


def _quiz(**settings):
    return make_quiz(
        [
            make_question("mc"),
            make_question("tf", type=QuestionType.TRUE_FALSE),
            make_question(
                "match",
                type=QuestionType.MATCHING_PAIRS,
                pairs=(("p1", "France", "Paris"), ("p2", "Italy", "Rome")),
            ),
            make_question("text", type=QuestionType.SHORT_ANSWER),
        ],
        **settings,
    )


def _result(question_id, user_answer, correct, is_correct, points=1.0):
    return QuestionResult(
        question_id=question_id,
        user_answer=user_answer,
        correct_answers=correct,
        is_correct=is_correct,
        points_earned=points if is_correct else 0.0,
        points_possible=points,
    )


def _submission():
    return SubmissionResult(
        attempt_id="att-1",
        quiz_id="quiz-1",
        score=2,
        total_points=3,
        percentage=66.67,
        time_spent_seconds=750,
        results=[
            _result("mc", "mc-a", [CorrectAnswer(id="mc-b", content="Beta")], False),
            _result("tf", "false", [CorrectAnswer(id="o2", content="False")], True),
            _result(
                "match",
                json.dumps({"p1": "p1", "p2": "p1"}),
                [CorrectAnswer(id="match-matches", content={"France": "Paris", "Italy": "Rome"})],
                False,
            ),
            _result("text", "zero", [CorrectAnswer(id="t0", content="0"), CorrectAnswer(id="t1", content="zero")], True),
        ],
    )


def test_choice_review_resolves_option_text():
    presenter = ResultsPresenter(_quiz(), _submission())

    review = presenter.review(0)

    assert review.status is ReviewStatus.INCORRECT
    assert review.user_answer_text == "Alpha"
    assert review.correct_answer_text == "Beta"
    assert review.show_correct_answer


def test_true_false_review_matches_lowercase_text():
    review = ResultsPresenter(_quiz(), _submission()).review(1)

    assert review.status is ReviewStatus.CORRECT
    assert review.user_answer_text == "False"
    assert not review.show_correct_answer


def test_matching_review_marks_each_pair():
    review = ResultsPresenter(_quiz(), _submission()).review(2)

    assert review.correct_answer_lines == ["France → Paris", "Italy → Rome"]
    assert [(row.left, row.right, row.is_correct) for row in review.match_rows] == [
        ("France", "Paris", True),
        ("Italy", "Paris", False),
    ]


def test_text_review_joins_accepted_answers():
    review = ResultsPresenter(_quiz(), _submission()).review(3)

    assert review.user_answer_text == "zero"
    assert review.correct_answer_text == "0 or zero"


def test_missing_result_is_ungraded():
    submission = _submission().model_copy(update={"results": []})
    presenter = ResultsPresenter(_quiz(), submission)

    review = presenter.review(0)

    assert review.status is ReviewStatus.UNGRADED
    assert review.user_answer_text == NO_ANSWER_TEXT
    assert presenter.status_for(0) is ReviewStatus.UNGRADED


def test_hidden_correct_answers_keep_correctness():
    review = ResultsPresenter(_quiz(show_correct_answers=False), _submission()).review(0)

    assert review.status is ReviewStatus.INCORRECT
    assert review.correct_answer_text is None
    assert not review.show_correct_answer


def test_summary():
    summary = ResultsPresenter(_quiz(passing_score=70), _submission()).summary()

    assert summary.correct_count == 2
    assert summary.question_count == 4
    assert summary.grade == "D"
    assert not summary.passed
    assert summary.time_spent_text == "12m 30s"


def test_grade_letter_boundaries():
    assert [grade_letter(p) for p in (95, 90, 85, 70, 60, 59.99)] == ["A", "A", "B", "C", "D", "F"]


def test_parse_user_matches():
    assert parse_user_matches('{"a": "b"}') == {"a": "b"}
    assert parse_user_matches("not json") is None
    assert parse_user_matches('["a"]') is None
    assert parse_user_matches(None) is None


def test_reviewer_formats_a_single_result():
    reviewer = QuestionReviewer(_quiz())

    review = reviewer.review(0, _result("mc", "mc-a", [CorrectAnswer(id="mc-b", content="Beta")], False))

    assert review.status is ReviewStatus.INCORRECT
    assert review.user_answer_text == "Alpha"
    assert review.correct_answer_text == "Beta"
    assert reviewer.review(3, None).status is ReviewStatus.UNGRADED
    assert review_status(None) is ReviewStatus.UNGRADED
    assert review_status(_result("tf", "false", [], True)) is ReviewStatus.CORRECT


def test_reviewer_hides_correct_answer_when_disabled():
    reviewer = QuestionReviewer(_quiz(show_correct_answers=False))

    review = reviewer.review(0, _result("mc", "mc-a", [CorrectAnswer(id="mc-b", content="Beta")], False))

    assert review.correct_answer_text is None
    assert not review.show_correct_answer
