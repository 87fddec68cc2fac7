import random
import unittest

from skilltest.stats import accuracy, apply_attempt, empty_stats, format_summary, recompute_from_log

from helpers import answer, local, make_engine, make_question, run_session


class AccuracyTests(unittest.TestCase):
    def test_zero_denominator_is_zero(self) -> None:
        self.assertEqual(accuracy(0, 0), 0.0)
        self.assertEqual(empty_stats().overall_accuracy, 0.0)

    def test_apply_attempt_is_pure(self) -> None:
        engine, clock, _ = make_engine()
        a = answer(engine, clock, make_question("q1"), True)
        before = empty_stats("u")
        after = apply_attempt(before, a)
        self.assertEqual(before.total_questions, 0)
        self.assertEqual(after.total_questions, 1)
        self.assertEqual(after.category_stats["Finance"].accuracy, 100.0)
        self.assertEqual(after.last_test_date, a.test_date)


class FinanceScenarioTests(unittest.TestCase):
    def test_three_finance_answers(self) -> None:
        engine, clock, _ = make_engine()
        q1, q2, q3 = (make_question(f"q{i}") for i in (1, 2, 3))
        run_session(engine, clock, [(q1, True), (q2, False), (q3, False)])

        stats = engine.get_statistics()
        self.assertEqual(stats.total_tests, 1)
        self.assertEqual(stats.total_questions, 3)
        self.assertEqual(stats.correct_answers, 1)
        self.assertEqual(stats.wrong_answers, 2)
        self.assertAlmostEqual(stats.category_stats["Finance"].accuracy, 33.33, places=2)
        self.assertAlmostEqual(stats.overall_accuracy, 100 / 3)

        entries = engine.review_entries()
        self.assertEqual(sorted(e.question_id for e in entries), ["q2", "q3"])
        self.assertTrue(all(e.wrong_count == 1 for e in entries))

        today = engine.get_daily_record(clock())
        self.assertEqual(today.question_count, 3)
        self.assertAlmostEqual(today.correct_rate, 33.33, places=2)


class IncrementalMatchesRecomputeTests(unittest.TestCase):
    def test_random_sessions(self) -> None:
        rng = random.Random(7)
        engine, clock, _ = make_engine(local(2025, 1, 1, 8, 0))
        questions = [make_question(f"q{i}", category=rng.choice(["Finance", "HR", "IT"])) for i in range(12)]
        uid = engine.user_id()
        for _ in range(15):
            clock.advance(hours=rng.randint(1, 30))
            plan = [(rng.choice(questions), rng.random() < 0.6) for _ in range(rng.randint(1, 6))]
            run_session(engine, clock, plan)
            self.assertEqual(engine.get_statistics(), recompute_from_log(engine.results.sessions(), uid))

    def test_summary_text(self) -> None:
        engine, clock, _ = make_engine()
        run_session(engine, clock, [(make_question("q1", "HR"), True), (make_question("q2", "IT"), False)])
        text = format_summary(engine.get_statistics())
        self.assertIn("Total: 1/2 correct (50.0%)", text)
        self.assertIn("HR: 1/1 (100.0%)", text)
        self.assertIn("IT: 0/1 (0.0%)", text)


if __name__ == "__main__":
    unittest.main()
