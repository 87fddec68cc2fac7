import unittest
from datetime import date

from skilltest.history import consecutive_days

from helpers import local, make_engine, make_question, run_session


class StreakTests(unittest.TestCase):
    def _active_on(self, *days: date):
        engine, clock, _ = make_engine(local(2024, 12, 31, 9, 0))
        for d in days:
            clock.set(local(d.year, d.month, d.day, 9, 0))
            run_session(engine, clock, [(make_question("q1"), True)])
        return engine, clock

    def test_three_day_streak(self) -> None:
        engine, clock = self._active_on(date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3))
        self.assertEqual(engine.get_consecutive_days(), 3)

    def test_gap_breaks_streak(self) -> None:
        engine, _ = self._active_on(date(2025, 1, 1), date(2025, 1, 3))
        self.assertEqual(engine.get_consecutive_days(), 1)

    def test_idle_today_is_zero(self) -> None:
        engine, clock = self._active_on(date(2025, 1, 1), date(2025, 1, 2))
        clock.set(local(2025, 1, 3, 18, 0))
        self.assertEqual(engine.get_consecutive_days(), 0)
        self.assertEqual(engine.history.get_consecutive_days(today="2025-01-02"), 2)

    def test_consecutive_days_helper(self) -> None:
        days = [date(2025, 1, 3), date(2025, 1, 1), date(2025, 1, 2), date(2024, 12, 30)]
        self.assertEqual(consecutive_days(days, date(2025, 1, 3)), 3)
        self.assertEqual(consecutive_days([], date(2025, 1, 3)), 0)


class DailyRecordTests(unittest.TestCase):
    def test_same_day_sessions_are_not_double_counted(self) -> None:
        engine, clock, _ = make_engine()
        run_session(engine, clock, [(make_question("q1"), True), (make_question("q2", "HR"), False)])
        run_session(engine, clock, [(make_question("q3", "IT"), True)])
        record = engine.get_daily_record("2025-01-03")
        self.assertEqual(record.question_count, 3)
        self.assertEqual(record.correct_count, 2)
        self.assertAlmostEqual(record.correct_rate, 200 / 3)
        self.assertEqual(record.categories, ["Finance", "HR", "IT"])
        self.assertEqual(len(engine.history.all_records()), 1)

    def test_session_spanning_midnight_splits(self) -> None:
        engine, clock, _ = make_engine(local(2025, 1, 3, 23, 58))
        q1, q2 = make_question("q1"), make_question("q2", "HR")
        a1 = engine.build_attempt(q1, 0, at=local(2025, 1, 3, 23, 59))
        a2 = engine.build_attempt(q2, 1, at=local(2025, 1, 4, 0, 1))
        engine.record_session([a1, a2], completed_at=local(2025, 1, 4, 0, 2))

        first = engine.get_daily_record(date(2025, 1, 3))
        second = engine.get_daily_record(date(2025, 1, 4))
        self.assertEqual((first.question_count, first.correct_count, first.categories), (1, 1, ["Finance"]))
        self.assertEqual((second.question_count, second.correct_count, second.categories), (1, 0, ["HR"]))
        self.assertEqual(len(engine.get_attempts_by_calendar_date("2025-01-03")), 1)

    def test_recompute_day_without_attempts_drops_record(self) -> None:
        engine, clock, _ = make_engine()
        run_session(engine, clock, [(make_question("q1"), True)])
        self.assertIsNone(engine.history.recompute_day("2025-01-02"))
        self.assertIsNotNone(engine.history.recompute_day("2025-01-03"))
        self.assertEqual([r.date for r in engine.history.all_records()], [date(2025, 1, 3)])

    def test_month_view(self) -> None:
        engine, clock, _ = make_engine(local(2025, 1, 30, 9, 0))
        run_session(engine, clock, [(make_question("q1"), True), (make_question("q2"), False)])
        clock.set(local(2025, 2, 1, 9, 0))
        run_session(engine, clock, [(make_question("q3"), True)])
        self.assertEqual([r.date for r in engine.history.get_month(2025, 1)], [date(2025, 1, 30)])
        summary = engine.history.month_summary(2025, 1)
        self.assertEqual(summary["study_days"], 1)
        self.assertEqual(summary["questions"], 2)
        self.assertEqual(summary["correct_rate"], 50.0)
        self.assertEqual(engine.history.month_summary(2025, 3)["correct_rate"], 0.0)


if __name__ == "__main__":
    unittest.main()
