import unittest
from datetime import datetime

from pydantic import ValidationError

from skilltest.storage.schema import (
    DailyLearningRecord,
    Question,
    QuestionAnswerAttempt,
    TestSessionRecord as SessionRecord,
)

from helpers import local, make_question


def attempt(**overrides) -> QuestionAnswerAttempt:
    data = dict(
        id="a1",
        user_id="u",
        category="Finance",
        question_id="q1",
        user_answer=1,
        correct_answer=1,
        is_correct=True,
        score=10,
        test_date=local(2025, 1, 3),
    )
    data.update(overrides)
    return QuestionAnswerAttempt(**data)


class AttemptSchemaTests(unittest.TestCase):
    def test_is_correct_must_match_answers(self) -> None:
        with self.assertRaises(ValidationError):
            attempt(user_answer=2)

    def test_incorrect_attempt_scores_zero(self) -> None:
        with self.assertRaises(ValidationError):
            attempt(user_answer=2, is_correct=False, score=10)
        self.assertEqual(attempt(user_answer=2, is_correct=False, score=0).score, 0)

    def test_unanswered_is_incorrect(self) -> None:
        a = attempt(user_answer=None, is_correct=False, score=0)
        self.assertIsNone(a.user_answer)

    def test_negative_time_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            attempt(time_spent=-1)

    def test_naive_timestamp_becomes_aware(self) -> None:
        a = attempt(test_date=datetime(2025, 1, 3, 8, 30))
        self.assertIsNotNone(a.test_date.tzinfo)

    def test_attempts_are_immutable(self) -> None:
        with self.assertRaises(ValidationError):
            attempt().score = 0


class SessionSchemaTests(unittest.TestCase):
    def test_score_and_total_must_match_results(self) -> None:
        results = [attempt(), attempt(id="a2", user_answer=0, is_correct=False, score=0)]
        ok = SessionRecord(id="t", date=local(2025, 1, 3), results=results, score=1, total=2)
        self.assertEqual(ok.total, 2)
        with self.assertRaises(ValidationError):
            SessionRecord(id="t", date=local(2025, 1, 3), results=results, score=2, total=2)
        with self.assertRaises(ValidationError):
            SessionRecord(id="t", date=local(2025, 1, 3), results=results, score=1, total=3)

    def test_empty_session_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            SessionRecord(id="t", date=local(2025, 1, 3), results=[], score=0, total=0)


class DailyRecordTests(unittest.TestCase):
    def test_correct_count_bounded_by_questions(self) -> None:
        with self.assertRaises(ValidationError):
            DailyLearningRecord(date="2025-01-03", question_count=2, correct_count=3, correct_rate=100)


class QuestionTests(unittest.TestCase):
    def test_answer_index_accepts_index_and_option_id(self) -> None:
        q = make_question("q1", correct=2)
        self.assertEqual(q.answer_index(1), 1)
        self.assertEqual(q.answer_index("c"), 2)
        self.assertIsNone(q.answer_index(None))

    def test_answer_index_rejects_out_of_range(self) -> None:
        q = make_question("q1")
        with self.assertRaises(ValueError):
            q.answer_index(4)
        with self.assertRaises(ValueError):
            q.answer_index("z")
        with self.assertRaises(ValueError):
            q.answer_index(True)

    def test_correct_answer_given_as_option_id(self) -> None:
        q = Question.model_validate(
            {
                "id": "q9",
                "category": "HR",
                "question": "?",
                "options": [{"id": "a", "text": "A"}, {"id": "b", "text": "B"}],
                "correct_answer": "b",
            }
        )
        self.assertEqual(q.correct_answer, 1)

    def test_correct_answer_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            make_question("q1", correct=7)


if __name__ == "__main__":
    unittest.main()
