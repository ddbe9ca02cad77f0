import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Questionnaire(Base):
    __tablename__ = "questionnaires"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False, unique=True)
    webhook_url = Column(String, nullable=True)  # Overrides COMPLETION_WEBHOOK_URL when set
    created_at = Column(DateTime, default=datetime.datetime.utcnow)


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (UniqueConstraint("questionnaire_id", "slug"),)
    id = Column(Integer, primary_key=True)
    questionnaire_id = Column(Integer, ForeignKey("questionnaires.id"), nullable=False)
    slug = Column(String, nullable=False)
    text = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    questionnaire = relationship("Questionnaire", back_populates="questions")


Questionnaire.questions = relationship(
    "Question", order_by=Question.position, back_populates="questionnaire"
)


class QuestionOption(Base):
    """
    A selectable answer, and/or a branching rule.
    Rows with is_rule=True are not shown; they only carry routing (e.g. value '*').
    """
    __tablename__ = "question_options"
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    value = Column(String, nullable=False)
    label = Column(String, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)
    is_rule = Column(Boolean, default=False, nullable=False)
    next_question_slug = Column(String, nullable=True)
    ends_quiz = Column(Boolean, default=False, nullable=False)
    question = relationship("Question", back_populates="options")


Question.options = relationship(
    "QuestionOption", order_by=QuestionOption.position, back_populates="question"
)
