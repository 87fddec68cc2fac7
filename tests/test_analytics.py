import tempfile
import unittest
from pathlib import Path

import pandas as pd

from skilltest.analytics import (
    ATTEMPT_DTYPES,
    attempts_frame,
    category_summary,
    daily_summary,
    ewma_by_day,
    export_ndjson,
)

from helpers import local, make_engine, make_question, run_session


class AnalyticsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, self.clock, _ = make_engine(local(2025, 1, 2, 9, 0))
        run_session(self.engine, self.clock, [(make_question("q1"), True), (make_question("q2", "HR"), False)])
        self.clock.set(local(2025, 1, 3, 9, 0))
        run_session(self.engine, self.clock, [(make_question("q3"), True), (make_question("q4"), True)])
        self.df = attempts_frame(self.engine.results.sessions())

    def test_frame_shape(self) -> None:
        self.assertEqual(list(self.df.columns), list(ATTEMPT_DTYPES))
        self.assertEqual(len(self.df), 4)
        self.assertEqual(list(self.df["question_id"]), ["q1", "q2", "q3", "q4"])

    def test_empty_frame(self) -> None:
        df = attempts_frame([])
        self.assertTrue(df.empty)
        self.assertTrue(category_summary(df).empty)
        self.assertTrue(daily_summary(df).empty)

    def test_category_summary(self) -> None:
        summary = category_summary(self.df)
        self.assertEqual(list(summary.index), ["Finance", "HR"])
        self.assertAlmostEqual(summary.loc["Finance", "accuracy"], 100.0)
        self.assertAlmostEqual(summary.loc["HR", "accuracy"], 0.0)
        self.assertEqual(int(summary.loc["Finance", "questions"]), 3)

    def test_daily_summary_matches_history(self) -> None:
        daily = daily_summary(self.df)
        self.assertEqual(list(daily["day"]), ["2025-01-02", "2025-01-03"])
        for row, record in zip(daily.itertuples(), self.engine.history.all_records()):
            self.assertEqual(row.questions, record.question_count)
            self.assertAlmostEqual(row.correct_rate, record.correct_rate)

    def test_smoothing_and_export(self) -> None:
        smooth = ewma_by_day(daily_summary(self.df), span=3)
        self.assertIn("correct_rate_smooth", smooth.columns)
        self.assertAlmostEqual(smooth["correct_rate_smooth"].iloc[0], 50.0)
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "daily.ndjson"
            export_ndjson(smooth, out)
            back = pd.read_json(out, lines=True)
            self.assertEqual(len(back), 2)


if __name__ == "__main__":
    unittest.main()
