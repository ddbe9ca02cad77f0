import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ..database.models import Questionnaire, Question, QuestionOption
from .catalog import ANY_ANSWER, QuestionCatalog, QuestionDefinition, QuestionOption as CatalogOption


def _to_definition(question: Question) -> QuestionDefinition:
    options = []
    rules: Dict[str, Optional[str]] = {}
    for row in question.options:
        if not row.is_rule:
            options.append(CatalogOption(value=row.value, label=row.label or row.value))
        if row.ends_quiz:
            rules[row.value] = None
        elif row.next_question_slug:
            rules[row.value] = row.next_question_slug
    return QuestionDefinition(id=question.slug, prompt=question.text, options=tuple(options), rules=rules)


class CatalogService:
    """
    Loads questionnaires from the database and keeps them in memory as catalogs.
    """
    def __init__(self):
        self._catalogs: Dict[str, QuestionCatalog] = {}

    async def load_from_db(self, session: AsyncSession):
        logging.info("Loading all questionnaires into memory...")

        stmt = select(Questionnaire).options(
            selectinload(Questionnaire.questions).selectinload(Question.options)
        )
        result = await session.execute(stmt)
        all_questionnaires = result.scalars().unique().all()

        if not all_questionnaires:
            logging.warning("No questionnaires found in the database.")
            return

        for q_naire in all_questionnaires:
            definitions = [_to_definition(q) for q in q_naire.questions]
            self._catalogs[q_naire.title] = QuestionCatalog(definitions, webhook_url=q_naire.webhook_url)
            logging.info(f"Loaded questionnaire '{q_naire.title}' with {len(definitions)} questions.")

    def get_catalog(self, title: str) -> Optional[QuestionCatalog]:
        return self._catalogs.get(title)


async def seed_questionnaire(session_maker: async_sessionmaker, title: str, question_definitions: List[dict]) -> bool:
    """ Inserts a questionnaire from plain definitions unless one with that title exists. """
    async with session_maker() as session:
        existing = (await session.execute(select(Questionnaire).where(Questionnaire.title == title))).scalar_one_or_none()
        if existing is not None:
            return False

        logging.info(f"Seeding questionnaire '{title}'...")
        questionnaire = Questionnaire(title=title)
        session.add(questionnaire)
        await session.flush()

        for position, q_def in enumerate(question_definitions):
            question = Question(
                questionnaire_id=questionnaire.id,
                slug=q_def["id"],
                text=q_def["text"],
                position=position,
            )
            session.add(question)
            await session.flush()

            rows = []
            for option_position, opt in enumerate(q_def.get("options", [])):
                rows.append(QuestionOption(
                    question_id=question.id,
                    value=opt["value"],
                    label=opt.get("label", opt["value"]),
                    position=option_position,
                    next_question_slug=opt.get("next"),
                    ends_quiz=bool(opt.get("end", False)),
                ))
            if "next" in q_def or q_def.get("end"):
                rows.append(QuestionOption(
                    question_id=question.id,
                    value=ANY_ANSWER,
                    label="",
                    position=len(rows),
                    is_rule=True,
                    next_question_slug=q_def.get("next"),
                    ends_quiz=bool(q_def.get("end", False)),
                ))
            session.add_all(rows)

        await session.commit()
        logging.info(f"Questionnaire '{title}' seeded with {len(question_definitions)} questions.")
        return True
