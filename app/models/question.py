from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, CheckConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base

class Question(Base):
    __tablename__ = "questions"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    class_ = Column("class", Integer, nullable=False)  # 6 to 10
    subject = Column(String, nullable=False)
    chapter = Column(String, nullable=True)
    topic = Column(String, nullable=True)
    subtopic = Column(String, nullable=True)
    question_text = Column(Text, nullable=True)
    question_image_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, server_default=text("true"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("now()"))
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=text("now()"))

    __table_args__ = (
        CheckConstraint('"class" BETWEEN 6 AND 10', name="questions_class_range"),
        CheckConstraint(
            "question_text IS NOT NULL OR question_image_url IS NOT NULL",
            name="questions_text_or_image",
        ),
    )

    options = relationship("QuestionOption", back_populates="question", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Question(id={self.id}, class={self.class_}, subject={self.subject})>"

class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    question_id = Column(UUID(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    option_text = Column(Text, nullable=True)
    option_image_url = Column(String, nullable=True)
    is_correct = Column(Boolean, nullable=False, server_default=text("false"))
    option_order = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=text("now()"))

    question = relationship("Question", back_populates="options")

    def __repr__(self):
        return f"<QuestionOption(id={self.id}, question_id={self.question_id}, order={self.option_order})>"
