"""Command line entry point for vocabmaster."""
import argparse
import logging
import sys
import time
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from vocabmaster.config import settings
from vocabmaster.logging_config import setup_logging
from vocabmaster.models.base import SessionLocal, init_db
from vocabmaster.models.quiz_models import AttemptSubmission, QuizMode, QuizStrategy
from vocabmaster.monitoring import start_monitoring
from vocabmaster.services.mastery_refresh import MasteryRefreshManager
from vocabmaster.services.progress_service import ProgressService
from vocabmaster.services.quiz_service import QuizService
from vocabmaster.services.word_catalog import CatalogError, WordCatalog

logger = logging.getLogger("vocabmaster")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabmaster", description="Vocabulary progress tracking")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("stats", help="Show learning statistics")

    need_practice = subparsers.add_parser("need-practice", help="List words that need practice")
    need_practice.add_argument("--unit", default=None)
    need_practice.add_argument("--limit", type=int, default=None)
    need_practice.add_argument("--max-level", type=int, default=None)

    quiz = subparsers.add_parser("quiz", help="Run a quiz in the terminal")
    quiz.add_argument("--catalog", required=True, help="Vocabulary JSON file")
    quiz.add_argument("--unit", required=True)
    quiz.add_argument(
        "--strategy",
        choices=[s.value for s in QuizStrategy],
        default=settings.quiz.default_strategy,
    )
    quiz.add_argument("--count", type=int, default=settings.quiz.question_count)
    quiz.add_argument("--mode", choices=[m.name.lower() for m in QuizMode], default="spelling")

    reset = subparsers.add_parser("reset-unit", help="Delete all progress for a unit")
    reset.add_argument("unit")
    return parser


def show_stats(service: ProgressService) -> None:
    stats = service.get_stats()
    print(f"Attempts: {stats.total_attempts} ({stats.accuracy:.0%} correct)")
    print(f"Words practiced: {stats.unique_words}")
    for row in stats.by_question_type:
        print(f"  {row['question_type']}: {row['correct']}/{row['count']} avg {row['avg_time']} ms")
    for band in ("mastered", "learning", "started", "new"):
        print(f"  {band}: {stats.mastery_distribution.get(band, 0)}")


def show_need_practice(service: ProgressService, args: argparse.Namespace) -> None:
    for row in service.get_words_need_practice(args.unit, args.limit, args.max_level):
        print(f"{row.mastery_level:>3}  {row.word_term}  ({row.word_id}, {row.attempt_count} attempts)")


def run_quiz(service: ProgressService, args: argparse.Namespace) -> None:
    catalog = WordCatalog.from_file(args.catalog)
    pool = catalog.get_unit_words(args.unit)
    if not pool:
        raise CatalogError(f"Unit {args.unit!r} has no words")

    quiz_service = QuizService(service)
    selected = quiz_service.select_quiz_words(pool, args.strategy, settings.clamp_question_count(args.count))
    questions = quiz_service.build_questions(selected, pool, QuizMode[args.mode.upper()])

    submissions: List[AttemptSubmission] = []
    for number, question in enumerate(questions, 1):
        print(f"\n[{number}/{len(questions)}] {question.question}")
        for index, option in enumerate(question.options or [], 1):
            print(f"  {index}. {option}")
        started = time.monotonic()
        try:
            answer = input("> ").strip()
        except EOFError:
            break
        time_spent = int((time.monotonic() - started) * 1000)
        if question.options and answer.isdigit() and 1 <= int(answer) <= len(question.options):
            answer = question.options[int(answer) - 1]
        is_correct = quiz_service.check_answer(question, answer)
        print("Correct!" if is_correct else f"Wrong, the answer is: {question.correct_answer}")
        submissions.append(AttemptSubmission(
            word_id=question.word.word_id,
            word_term=question.word.term,
            unit_id=question.word.unit_id,
            question_type=question.type,
            is_correct=is_correct,
            time_spent=time_spent,
            user_answer=answer,
        ))

    if submissions:
        service.record_attempts(submissions)
        correct = sum(1 for s in submissions if s.is_correct)
        print(f"\nScore: {correct}/{len(submissions)}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("Starting vocabmaster ...", args.log_level)

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)

    init_db()
    if args.command == "init-db":
        logger.info("Database initialized")
        return 0

    db = SessionLocal()
    service = ProgressService(db, MasteryRefreshManager())
    try:
        if args.command == "stats":
            show_stats(service)
        elif args.command == "need-practice":
            show_need_practice(service, args)
        elif args.command == "quiz":
            run_quiz(service, args)
        elif args.command == "reset-unit":
            print(f"Reset {service.reset_unit(args.unit)} words")
    except (CatalogError, SQLAlchemyError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 130
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
