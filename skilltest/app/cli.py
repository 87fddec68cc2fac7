from __future__ import annotations

"""CLI for inspecting and maintaining a skilltest store."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..analytics import attempts_frame, daily_summary, ewma_by_day, export_ndjson, export_parquet
from ..config.config import EngineConfig, load_config, validate_config
from ..engine import QuizEngine
from ..errors import SkillTestError
from ..stats.stats import format_summary
from .explain import enable as explain_enable


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="skilltest")
    p.add_argument("--config", default=None, help="YAML config (defaults to the packaged defaults.yml)")
    p.add_argument("--store", default=None, help="Store file; overrides storage.path")
    p.add_argument("--explain", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("stats")

    rp = sub.add_parser("review")
    rp.add_argument("--category", default=None)
    rp.add_argument("--remove", metavar="QUESTION_ID", default=None)

    sub.add_parser("streak")

    hp = sub.add_parser("history")
    hp.add_argument("--month", default=None, help="YYYY-MM; all days when omitted")

    ep = sub.add_parser("export-csv")
    ep.add_argument("--out", default=None, help="Target file; defaults to <prefix>_<today>.csv")

    dp = sub.add_parser("delete-date")
    dp.add_argument("date", help="YYYY-MM-DD")
    dp.add_argument("--yes", action="store_true", help="Confirm the deletion")

    wp = sub.add_parser("wipe")
    wp.add_argument("--yes", action="store_true", help="Confirm deleting everything")

    sub.add_parser("check")
    sub.add_parser("backups")

    sp = sub.add_parser("snapshot")
    sp.add_argument("--out", required=True, help=".parquet or .ndjson target")
    return p


def _engine(cfg: EngineConfig, store: Optional[str]) -> QuizEngine:
    if store:
        cfg = cfg.model_copy(update={"storage": cfg.storage.model_copy(update={"backend": "json", "path": Path(store)})})
    return QuizEngine.from_config(cfg)


def _refuse(what: str) -> int:
    print(f"Refusing to {what} without --yes.", file=sys.stderr)
    return 2


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        cfg = validate_config(load_config(args.config))
    except SkillTestError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    logging.basicConfig(level=cfg.logging.level, format="%(levelname)s %(name)s: %(message)s")
    if args.explain:
        explain_enable(True)

    engine = _engine(cfg, args.store)
    try:
        return _run(args, engine, cfg)
    except (SkillTestError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace, engine: QuizEngine, cfg: EngineConfig) -> int:
    if args.cmd == "stats":
        print(format_summary(engine.get_statistics()))
        return 0

    if args.cmd == "review":
        if args.remove:
            if engine.remove_review_entry(args.remove):
                print(f"Removed {args.remove} from the review queue.")
                return 0
            print(f"{args.remove} is not in the review queue.")
            return 1
        entries = engine.review_entries(args.category)
        if not entries:
            print("Review queue is empty.")
        for e in entries:
            print(f"[{e.category}] {e.question_id} x{e.wrong_count} last {e.last_attempt_date:%Y-%m-%d %H:%M}  {e.question}")
        return 0

    if args.cmd == "streak":
        print(f"Consecutive days: {engine.get_consecutive_days()}")
        return 0

    if args.cmd == "history":
        if args.month:
            year, month = (int(x) for x in args.month.split("-", 1))
            records = engine.history.get_month(year, month)
            s = engine.history.month_summary(year, month)
            print(f"{args.month}: {s['study_days']} days, {s['questions']} questions, {s['correct_rate']:.1f}% correct")
        else:
            records = engine.history.all_records()
        for r in records:
            print(f"{r.date.isoformat()}  {r.correct_count}/{r.question_count} ({r.correct_rate:.1f}%)  {', '.join(r.categories)}")
        return 0

    if args.cmd == "export-csv":
        out = Path(args.out or engine.export_filename())
        out.write_text(engine.export_csv(), encoding="utf-8")
        print(f"Wrote {out}")
        return 0

    if args.cmd == "delete-date":
        if not args.yes:
            return _refuse(f"delete answers from {args.date}")
        removed = engine.delete_by_calendar_date(args.date)
        print(f"Deleted {removed} answers from {args.date}." if removed else f"No answers found for {args.date}.")
        return 0

    if args.cmd == "wipe":
        if not args.yes:
            return _refuse("delete all data")
        print(engine.wipe_all().describe())
        return 0

    if args.cmd == "check":
        report = engine.store.check_integrity()
        for key, status in report.items():
            print(f"{key}: {status}")
        return 1 if "corrupt" in report.values() else 0

    if args.cmd == "backups":
        for key, ts in engine.store.list_backups().items():
            print(f"{key}: {ts.isoformat() if ts else 'unreadable'}")
        return 0

    if args.cmd == "snapshot":
        out = Path(args.out)
        daily = ewma_by_day(daily_summary(attempts_frame(engine.results.sessions())), span=cfg.analytics.smoothing_span)
        if out.suffix == ".parquet":
            export_parquet(daily, out)
        else:
            export_ndjson(daily, out)
        print(f"Wrote {out}")
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
