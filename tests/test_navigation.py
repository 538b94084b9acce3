import pytest

from conftest import make_question, make_quiz
from quiz_player.core.answers import AnswerStore, MatchesAnswer
from quiz_player.core.models import FeedbackMode
from quiz_player.core.navigation import (
    ExplanationPosition,
    NavigationResult,
    NavigationStateMachine,
    QuestionPosition,
    ReviewNavigator,
    TransitionPosition,
    position_from_dict,
    position_to_dict,
)


def _machine(quiz, *, is_test_mode=False):
    answers = AnswerStore(quiz.question_ids())
    return NavigationStateMachine(quiz, answers, is_test_mode=is_test_mode), answers


def _walk_forward(machine):
    visited = [machine.position]
    while machine.next() is NavigationResult.MOVED:
        visited.append(machine.position)
    return visited


def test_next_visits_transitions_questions_and_answered_explanations_in_order(three_step_quiz):
    machine, answers = _machine(three_step_quiz)
    answers.set("q0", "q0-a")
    answers.set("q1", "q1-b")

    assert _walk_forward(machine) == [
        TransitionPosition(0),
        QuestionPosition(0),
        ExplanationPosition(0),
        QuestionPosition(1),
        TransitionPosition(2),
        QuestionPosition(2),
    ]


def test_next_at_last_question_reports_end_and_stays(three_step_quiz):
    machine, _ = _machine(three_step_quiz)
    _walk_forward(machine)

    assert machine.next() is NavigationResult.END_REACHED
    assert machine.position == QuestionPosition(2)
    assert machine.is_last_step()


def test_unanswered_explanation_is_skipped_until_answered(three_step_quiz):
    machine, answers = _machine(three_step_quiz)
    machine.next()
    assert machine.position == QuestionPosition(0)

    machine.previous()
    machine.next()
    answers.set("q0", "q0-a")

    assert machine.next() is NavigationResult.MOVED
    assert machine.position == ExplanationPosition(0)


def test_explanation_requires_non_empty_text():
    quiz = make_quiz([make_question("q0", explanation="   "), make_question("q1")])
    machine, answers = _machine(quiz)
    answers.set("q0", "q0-a")

    machine.next()

    assert machine.position == QuestionPosition(1)


def test_previous_walks_back_through_every_step(three_step_quiz):
    machine, answers = _machine(three_step_quiz)
    answers.set("q0", "q0-a")
    _walk_forward(machine)

    visited = [machine.position]
    while machine.previous() is NavigationResult.MOVED:
        visited.append(machine.position)

    assert visited == [
        QuestionPosition(2),
        TransitionPosition(2),
        QuestionPosition(1),
        ExplanationPosition(0),
        QuestionPosition(0),
        TransitionPosition(0),
    ]


def test_first_and_last(three_step_quiz):
    machine, answers = _machine(three_step_quiz)
    answers.set("q2", "q2-a")

    assert machine.last() is NavigationResult.MOVED
    assert machine.position == ExplanationPosition(2)
    assert machine.first() is NavigationResult.MOVED
    assert machine.position == TransitionPosition(0)
    assert machine.first() is NavigationResult.IGNORED


@pytest.mark.parametrize("index", [-1, 3, 99])
def test_out_of_range_jump_is_ignored(three_step_quiz, index):
    machine, _ = _machine(three_step_quiz)

    assert machine.jump_to_question(index) is NavigationResult.IGNORED
    assert machine.position == TransitionPosition(0)


def test_jump_to_current_question_from_explanation(three_step_quiz):
    machine, answers = _machine(three_step_quiz)
    answers.set("q0", "q0-a")
    machine.next()
    machine.next()
    assert machine.position == ExplanationPosition(0)

    assert machine.jump_to_question(0) is NavigationResult.MOVED
    assert machine.position == QuestionPosition(0)


def test_empty_quiz_is_inert():
    machine, _ = _machine(make_quiz([]))

    assert machine.position is None
    for move in (machine.next, machine.previous, machine.first, machine.last):
        assert move() is NavigationResult.IGNORED
    assert machine.jump_to_question(0) is NavigationResult.IGNORED


def test_test_mode_locks_answered_questions_after_moving_on():
    quiz = make_quiz([make_question("q0"), make_question("q1"), make_question("q2")])
    machine, answers = _machine(quiz, is_test_mode=True)
    answers.set("q0", "q0-a")

    machine.next()

    assert machine.answered_set == frozenset({0})
    assert machine.is_locked(0)
    assert machine.previous() is NavigationResult.IGNORED
    assert machine.jump_to_question(0) is NavigationResult.IGNORED
    assert machine.first() is NavigationResult.IGNORED
    assert machine.position == QuestionPosition(1)


def test_test_mode_does_not_lock_unanswered_questions():
    quiz = make_quiz([make_question("q0"), make_question("q1")])
    machine, _ = _machine(quiz, is_test_mode=True)

    machine.next()

    assert not machine.is_locked(0)
    assert machine.previous() is NavigationResult.MOVED
    assert machine.position == QuestionPosition(0)


def test_forward_jump_locks_every_answered_question_skipped():
    quiz = make_quiz([make_question(f"q{i}") for i in range(4)])
    machine, answers = _machine(quiz, is_test_mode=True)
    answers.set("q0", "q0-a")
    answers.set("q1", "q1-a")

    machine.jump_to_question(3)

    assert machine.answered_set == frozenset({0, 1})


def test_exam_mode_only_moves_forward(three_step_quiz):
    quiz = make_quiz(list(three_step_quiz.questions), transitions=(0, 2), exam_mode=True)
    machine, _ = _machine(quiz, is_test_mode=True)
    machine.next()
    machine.next()
    position = machine.position
    assert position == QuestionPosition(1)

    assert machine.previous() is NavigationResult.IGNORED
    assert machine.first() is NavigationResult.IGNORED
    assert machine.jump_to_question(0) is NavigationResult.IGNORED
    assert machine.position == position
    assert machine.is_locked(0)
    assert machine.jump_to_question(2) is NavigationResult.MOVED


def test_exam_setting_without_test_mode_allows_going_back(three_step_quiz):
    quiz = make_quiz(list(three_step_quiz.questions), transitions=(0, 2), exam_mode=True)
    machine, _ = _machine(quiz)
    machine.next()

    assert not machine.is_exam_locked
    assert machine.previous() is NavigationResult.MOVED


def test_restore_rejects_unreachable_explanation(three_step_quiz):
    machine, answers = _machine(three_step_quiz)

    assert machine.restore(ExplanationPosition(0)) is False
    assert machine.position == TransitionPosition(0)

    answers.set("q0", MatchesAnswer({"x": "y"}))
    assert machine.restore(ExplanationPosition(0)) is True


def test_restore_rejects_missing_transition_and_bad_index(three_step_quiz):
    machine, _ = _machine(three_step_quiz)

    assert machine.restore(TransitionPosition(1)) is False
    assert machine.restore(QuestionPosition(7)) is False
    assert machine.position == TransitionPosition(0)


def test_restore_keeps_valid_answered_indices_only(three_step_quiz):
    machine, _ = _machine(three_step_quiz, is_test_mode=True)

    machine.restore(QuestionPosition(2), {0, 1, 9})

    assert machine.answered_set == frozenset({0, 1})


def test_position_dict_round_trip_and_validation():
    assert position_from_dict(position_to_dict(ExplanationPosition(4))) == ExplanationPosition(4)
    with pytest.raises(ValueError):
        position_from_dict({"kind": "question", "index": "2"})
    with pytest.raises(ValueError):
        position_from_dict({"kind": "summary", "index": 0})


def test_review_navigator_clamps_and_reports():
    navigator = ReviewNavigator(3)

    assert navigator.previous() is NavigationResult.IGNORED
    assert navigator.last() is NavigationResult.MOVED
    assert navigator.index == 2
    assert not navigator.can_go_next()
    assert navigator.jump_to(10) is NavigationResult.IGNORED
    assert navigator.jump_to(1) is NavigationResult.MOVED
    assert navigator.position == QuestionPosition(1)


def test_immediate_feedback_waits_for_grade_and_skips_explanations(three_step_quiz):
    quiz = make_quiz(list(three_step_quiz.questions), transitions=(0, 2), feedback_mode=FeedbackMode.IMMEDIATE)
    graded = set()
    answers = AnswerStore(quiz.question_ids())
    machine = NavigationStateMachine(quiz, answers, is_graded=graded.__contains__)

    assert machine.next() is NavigationResult.MOVED
    answers.set("q0", "q0-a")
    assert machine.is_awaiting_grade()
    assert machine.next() is NavigationResult.IGNORED
    assert machine.jump_to_question(1) is NavigationResult.IGNORED
    assert not machine.can_go_last()
    assert machine.last() is NavigationResult.IGNORED

    graded.add("q0")

    assert not machine.explanation_reachable(0)
    assert machine.next() is NavigationResult.MOVED
    assert machine.position == QuestionPosition(1)
    assert machine.jump_to_question(0) is NavigationResult.MOVED

    graded.update({"q1", "q2"})
    assert machine.can_go_last()
    assert machine.last() is NavigationResult.MOVED
    assert machine.position == QuestionPosition(2)
