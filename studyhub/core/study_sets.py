# study_sets.py

"""
Helpers for generated study sets: saving flashcards, grading quiz answers
and plain-text exports for download.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from core.backend import BackendFacade
from core.model_schemas import FlashcardItem, QuizQuestion
from core.results import Result


def save_generated_flashcards(
    backend: BackendFacade,
    cards: Sequence[FlashcardItem],
    document_id: Optional[str] = None,
) -> Result:
    """
    Persist an in-memory generated set as one batch insert.
    """
    if not cards:
        return Result.failure("Generate some flashcards before saving.")
    return backend.create_flashcards(cards, document_id)


def grade_quiz(questions: Sequence[QuizQuestion], answers: Dict[int, str]) -> Dict[str, int]:
    """
    Score multiple-choice answers by exact option match.

    ``answers`` maps question index to the chosen option. Open questions are
    self-assessed against the sample answer and are not counted.
    """
    total = correct = 0
    for idx, question in enumerate(questions):
        if not question.is_multiple_choice:
            continue
        total += 1
        chosen = (answers.get(idx) or "").strip()
        if chosen and chosen == question.answer.strip():
            correct += 1
    return {"correct": correct, "total": total}


def flashcards_to_text(cards: Sequence[FlashcardItem]) -> str:
    blocks = []
    for idx, card in enumerate(cards, start=1):
        blocks.append(f"Card {idx}\nFront: {card.front}\nBack: {card.back}\n")
    return "\n".join(blocks)


def quiz_to_text(questions: Sequence[QuizQuestion]) -> str:
    lines: List[str] = []
    for idx, question in enumerate(questions, start=1):
        lines.append(f"Question {idx}: {question.question}")
        for letter, option in zip("ABCDEFGH", question.options):
            lines.append(f"  {letter}. {option}")
        lines.append(f"\nCorrect Answer: {question.answer}\n")
    return "\n".join(lines)
