"""
Content management for the admin area.

Status listings, per-item bulk actions and the nested JSON document used to
export, preview and import a whole learning path. An imported path always
starts as a draft.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import select

from lingua_learn.core.database import Page, paginate
from lingua_learn.core.database.entities import (
    AuditAction,
    ContentStatus,
    Exercise,
    GuideBookEntry,
    LearningPath,
    Lesson,
    Quiz,
    QuizQuestion,
    Section,
    Unit,
    VocabularyItem,
)
from lingua_learn.core.errors import NotFoundError, ValidationFailedError
from lingua_learn.core.logging_config import get_logger

from .audit import snapshot
from .base import BaseService
from .content_tree import children, delete_learning_path_tree, get_or_404
from .exercises import exercise_content_errors
from .learning_paths import apply_status

logger = get_logger(__name__)

AREA = "learning_path"
_FIELDS = {
    "learning_path": ("title", "description", "target_level"),
    "unit": ("title", "description", "order"),
    "lesson": ("title", "description", "order"),
    "section": ("title", "content", "order"),
    "exercise": ("type", "content", "order"),
    "vocabulary": ("word", "translation", "example"),
    "guide": ("topic", "content"),
    "quiz": ("title", "description", "passing_score", "time_limit", "is_published", "order"),
    "question": ("question", "type", "options", "correct_answer", "explanation", "points", "order"),
}


def _pick(entity: Any, kind: str) -> Dict[str, Any]:
    return {field: getattr(entity, field) for field in _FIELDS[kind]}


def _values(node: Dict[str, Any], kind: str) -> Dict[str, Any]:
    return {field: node[field] for field in _FIELDS[kind] if field in node}


class ContentTransferService(BaseService):
    async def by_status(self, status: str, page: int = 1, per_page: int = 15) -> Page:
        if status not in {item.value for item in ContentStatus}:
            raise NotFoundError(f"Unknown content status '{status}'")
        stmt = select(LearningPath).where(LearningPath.status == status)
        stmt = stmt.order_by(LearningPath.updated_at.desc(), LearningPath.id.desc())
        return await paginate(self.session, stmt, page, per_page)

    async def _bulk_status(self, ids: List[int], status: str, action: AuditAction, verb: str) -> List[Dict[str, Any]]:
        results = []
        for path_id in ids:
            path = await self.session.get(LearningPath, path_id)
            if path is None:
                results.append({"id": path_id, "success": False, "message": "Learning path not found."})
                continue
            old_values = snapshot(path)
            apply_status(path, status)
            self.audit.record(action, AREA, path.id, old_values=old_values, new_values=snapshot(path))
            results.append({"id": path_id, "success": True, "message": f"Learning path {verb}."})
        await self.session.commit()
        return results

    async def bulk_publish(self, ids: List[int]) -> List[Dict[str, Any]]:
        return await self._bulk_status(ids, ContentStatus.PUBLISHED.value, AuditAction.PUBLISHED, "published")

    async def bulk_archive(self, ids: List[int]) -> List[Dict[str, Any]]:
        return await self._bulk_status(ids, ContentStatus.ARCHIVED.value, AuditAction.ARCHIVED, "archived")

    async def bulk_delete(self, ids: List[int]) -> List[Dict[str, Any]]:
        results = []
        for path_id in ids:
            path = await self.session.get(LearningPath, path_id)
            if path is None:
                results.append({"id": path_id, "success": False, "message": "Learning path not found."})
                continue
            if path.is_published:
                results.append({"id": path_id, "success": False, "message": "Cannot delete a published learning path."})
                continue
            old_values = snapshot(path)
            await delete_learning_path_tree(self.session, path_id)
            self.audit.deleted(AREA, old_values, path_id)
            results.append({"id": path_id, "success": True, "message": "Learning path deleted."})
        await self.session.commit()
        return results

    # ------------------------------------------------------------------
    # Nested document
    # ------------------------------------------------------------------

    async def _quizzes(self, field: str, parent_id: int) -> List[Dict[str, Any]]:
        quizzes = []
        for quiz in await children(self.session, Quiz, field, parent_id):
            node = _pick(quiz, "quiz")
            node["questions"] = [_pick(q, "question") for q in await children(self.session, QuizQuestion, "quiz_id", quiz.id)]
            quizzes.append(node)
        return quizzes

    async def document(self, path_id: int) -> Dict[str, Any]:
        """The learning path with every descendant, in order."""
        path = await get_or_404(self.session, LearningPath, path_id)
        document = _pick(path, "learning_path")
        document["id"] = path.id
        document["status"] = path.status
        document["units"] = []
        for unit in await children(self.session, Unit, "learning_path_id", path.id):
            unit_node = _pick(unit, "unit")
            unit_node["guide_book_entries"] = [
                _pick(entry, "guide") for entry in await children(self.session, GuideBookEntry, "unit_id", unit.id)
            ]
            unit_node["quizzes"] = await self._quizzes("unit_id", unit.id)
            unit_node["lessons"] = []
            for lesson in await children(self.session, Lesson, "unit_id", unit.id):
                lesson_node = _pick(lesson, "lesson")
                lesson_node["vocabulary_items"] = [
                    _pick(item, "vocabulary") for item in await children(self.session, VocabularyItem, "lesson_id", lesson.id)
                ]
                lesson_node["quizzes"] = await self._quizzes("lesson_id", lesson.id)
                lesson_node["sections"] = []
                for section in await children(self.session, Section, "lesson_id", lesson.id):
                    section_node = _pick(section, "section")
                    section_node["exercises"] = [
                        _pick(exercise, "exercise")
                        for exercise in await children(self.session, Exercise, "section_id", section.id)
                    ]
                    lesson_node["sections"].append(section_node)
                unit_node["lessons"].append(lesson_node)
            document["units"].append(unit_node)
        return document

    async def export(self, path_id: int) -> Dict[str, Any]:
        document = await self.document(path_id)
        self.audit.record(AuditAction.EXPORTED, AREA, path_id)
        await self.session.commit()
        return document

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(document: Dict[str, Any]) -> None:
        errors: Dict[str, List[str]] = {}
        if not isinstance(document.get("title"), str) or not document["title"].strip():
            errors["document.title"] = ["The title field is required."]
        for u, unit in enumerate(document.get("units") or []):
            if not isinstance(unit, dict) or not unit.get("title"):
                errors[f"document.units.{u}.title"] = ["The title field is required."]
                continue
            for n, lesson in enumerate(unit.get("lessons") or []):
                if not isinstance(lesson, dict) or not lesson.get("title"):
                    errors[f"document.units.{u}.lessons.{n}.title"] = ["The title field is required."]
                    continue
                for s, section in enumerate(lesson.get("sections") or []):
                    if not isinstance(section, dict) or not section.get("title"):
                        errors[f"document.units.{u}.lessons.{n}.sections.{s}.title"] = ["The title field is required."]
                        continue
                    for e, exercise in enumerate(section.get("exercises") or []):
                        prefix = f"document.units.{u}.lessons.{n}.sections.{s}.exercises.{e}"
                        exercise = exercise if isinstance(exercise, dict) else {}
                        for key, messages in exercise_content_errors(exercise.get("type", ""), exercise.get("content")).items():
                            errors[f"{prefix}.{key}"] = messages
        if errors:
            raise ValidationFailedError(errors)

    def _add_quizzes(self, nodes: List[Dict[str, Any]], **parent: int) -> List[tuple]:
        staged = []
        for position, node in enumerate(nodes or [], start=1):
            quiz = Quiz(**_values(node, "quiz"), **parent)
            quiz.order = node.get("order") or position
            quiz.is_published = False
            self.session.add(quiz)
            staged.append((quiz, node.get("questions") or []))
        return staged

    async def import_document(self, document: Dict[str, Any]) -> LearningPath:
        """Create a draft learning path from an exported document in one transaction."""
        self._validate(document)
        path = LearningPath(**_values(document, "learning_path"), status=ContentStatus.DRAFT.value)
        self.session.add(path)
        await self.session.flush()

        quizzes: List[tuple] = []
        for unit_position, unit_node in enumerate(document.get("units") or [], start=1):
            unit = Unit(**_values(unit_node, "unit"), learning_path_id=path.id)
            unit.order = unit_node.get("order") or unit_position
            self.session.add(unit)
            await self.session.flush()
            for entry in unit_node.get("guide_book_entries") or []:
                self.session.add(GuideBookEntry(**_values(entry, "guide"), unit_id=unit.id))
            quizzes.extend(self._add_quizzes(unit_node.get("quizzes"), unit_id=unit.id))

            for lesson_position, lesson_node in enumerate(unit_node.get("lessons") or [], start=1):
                lesson = Lesson(**_values(lesson_node, "lesson"), unit_id=unit.id)
                lesson.order = lesson_node.get("order") or lesson_position
                self.session.add(lesson)
                await self.session.flush()
                for item in lesson_node.get("vocabulary_items") or []:
                    self.session.add(VocabularyItem(**_values(item, "vocabulary"), lesson_id=lesson.id))
                quizzes.extend(self._add_quizzes(lesson_node.get("quizzes"), lesson_id=lesson.id))

                for section_position, section_node in enumerate(lesson_node.get("sections") or [], start=1):
                    section = Section(**_values(section_node, "section"), lesson_id=lesson.id)
                    section.order = section_node.get("order") or section_position
                    self.session.add(section)
                    await self.session.flush()
                    for exercise_position, exercise_node in enumerate(section_node.get("exercises") or [], start=1):
                        exercise = Exercise(**_values(exercise_node, "exercise"), section_id=section.id)
                        exercise.order = exercise_node.get("order") or exercise_position
                        self.session.add(exercise)

        await self.session.flush()
        for quiz, questions in quizzes:
            for position, question_node in enumerate(questions, start=1):
                question = QuizQuestion(**_values(question_node, "question"), quiz_id=quiz.id)
                question.order = question_node.get("order") or position
                self.session.add(question)

        await self.session.flush()
        self.audit.record(
            AuditAction.IMPORTED, AREA, path.id, new_values=snapshot(path), meta_data={"units": len(document.get("units") or [])}
        )
        await self.session.commit()
        await self.session.refresh(path)
        logger.info(f"Imported learning path {path.id} '{path.title}'")
        return path
