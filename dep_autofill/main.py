"""
DEP Autofill — Main Entry Point

Answer the anchors on the console and complete a questionnaire:
    python -m dep_autofill.main [questions.json]

Run as an API server (for the chat frontend):
    python -m dep_autofill.main --serve
    # or: uvicorn dep_autofill.api:app --reload --port 8000

Or import and run programmatically:
    from dep_autofill.main import run
    outcome = run("path/to/questions.json")
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Optional

from dep_autofill.config import get_settings
from dep_autofill.data import DEFAULT_ANSWERS, get_question_registry
from dep_autofill.models import AnchorQuestionPayload, AnswerValue, PredictionOutcome, QuestionData
from dep_autofill.services import QuestionService
from dep_autofill.utils.logger import setup_logging


def load_questions(file_path: str = "") -> list[QuestionData]:
    """Questionnaire rows from a JSON list, or the built-in question set."""
    if file_path:
        rows = json.loads(Path(file_path).read_text(encoding="utf-8"))
        return [QuestionData.model_validate(row) for row in rows]

    registry = get_question_registry()
    ids = list(dict.fromkeys([*registry.ids(), *DEFAULT_ANSWERS]))
    questions = []
    for qid in ids:
        question = registry.get(qid)
        questions.append(QuestionData(
            id=qid,
            question=question.text if question else "",
            options=list(question.options or []) if question else [],
        ))
    return questions


def parse_reply(reply: str, options: list[str]) -> Optional[AnswerValue]:
    """Option numbers ("2" or "1, 3") map to option text; anything else is kept as typed."""
    reply = reply.strip()
    if not reply:
        return None

    parts = [p.strip() for p in reply.split(",")]
    if options and all(p.isdigit() and 1 <= int(p) <= len(options) for p in parts):
        chosen = [options[int(p) - 1] for p in parts]
        return chosen if len(chosen) > 1 else chosen[0]
    return reply


async def console_prompt(payload: AnchorQuestionPayload) -> Optional[AnswerValue]:
    """Ask one anchor on stdin. A blank reply skips it."""
    print()
    print(payload.prompt)
    for i, option in enumerate(payload.options, start=1):
        print(f"  {i}. {option}")
    reply = await asyncio.to_thread(input, "> ")
    return parse_reply(reply, payload.options)


def run(file_path: str = "") -> PredictionOutcome:
    """Ask the anchors, complete the questionnaire and log a summary."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()}")
    logger.info("=" * 60)

    questions = load_questions(file_path)
    service = QuestionService()
    summary = service.summarize(questions)
    logger.info(
        f"Loaded {summary.total_questions} questions "
        f"({summary.pre_existing_answers} already answered) across {len(summary.section_counts)} sections"
    )

    # The prompt waits on a human; no timeout applies on the console
    service.settings = settings.model_copy(update={"prompt_timeout_seconds": None})
    outcome = asyncio.run(service.predict_from_anchors(questions, {}, prompt_for_answer=console_prompt))

    _print_summary(outcome)
    return outcome


def _print_summary(outcome: PredictionOutcome) -> None:
    """Log answer counts per provenance."""
    logger = logging.getLogger(__name__)

    sources = Counter(
        q.metadata.source.value
        for q in outcome.predicted_questions
        if q.metadata is not None and q.metadata.source is not None
    )

    logger.info("")
    logger.info("-" * 60)
    logger.info("  PREDICTION SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Questions:      {len(outcome.predicted_questions)}")
    logger.info(f"  Answers:        {len(outcome.answers)}")
    for source, count in sorted(sources.items()):
        logger.info(f"  {source:<16}{count}")
    logger.info("-" * 60)


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("dep_autofill.api:app", host=host, port=port, reload=True)


def cli(argv: Optional[list[str]] = None) -> None:
    """Console entry: `--serve` starts the API, otherwise run on an optional questions file."""
    args = sys.argv[1:] if argv is None else argv
    if "--serve" in args:
        serve()
    else:
        run(args[0] if args else "")


if __name__ == "__main__":
    cli()
