from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base

class Attempt(Base):
    __tablename__ = "attempts"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True), nullable=False)  # Supabase auth UID
    class_ = Column("class", Integer, nullable=False)
    subject = Column(String, nullable=False)
    scope_type = Column(String, nullable=False)  # 'chapter' or 'topic'
    scope_value = Column(String, nullable=False)
    question_count = Column(Integer, nullable=False)
    score = Column(Float, nullable=True)  # percentage, null until submitted
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("now()"))

    __table_args__ = (
        CheckConstraint("scope_type IN ('chapter', 'topic')", name="attempts_scope_type"),
    )

    answers = relationship("AttemptAnswer", back_populates="attempt", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Attempt(id={self.id}, user_id={self.user_id}, score={self.score})>"

class AttemptAnswer(Base):
    __tablename__ = "attempt_answers"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    attempt_id = Column(UUID(as_uuid=True), ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(UUID(as_uuid=True), ForeignKey("questions.id"), nullable=False)
    selected_option_id = Column(UUID(as_uuid=True), ForeignKey("question_options.id"), nullable=False)
    time_taken_seconds = Column(Integer, nullable=False, server_default=text("0"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("now()"))

    # One saved answer per question per attempt; answer saves are upserts on this pair
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="unique_attempt_question_answer"),
    )

    attempt = relationship("Attempt", back_populates="answers")

    def __repr__(self):
        return f"<AttemptAnswer(attempt_id={self.attempt_id}, question_id={self.question_id})>"
