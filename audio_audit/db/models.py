"""
SQLAlchemy ORM models for the language-learning content database.

Only the columns the audit reads are mapped.

Models:
    VocabEntry: A vocabulary item whose word has a pronunciation file
    Activity: A learning activity belonging to a course
    ActivityContent: One content block of an activity (example sentences carry audio)
"""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

EXAMPLE_SENTENCE = "example-sentence"


class VocabEntry(Base):
    """
    Represents a vocabulary item.

    Attributes:
        id: Primary key
        word: The word; its audio lives at <prefix>/<word>.mp3
        course: Course tag the word belongs to
    """

    __tablename__ = "vocab"

    id = Column(Integer, primary_key=True, autoincrement=True)
    word = Column(String(255), nullable=True, index=True)
    course = Column(String(64), nullable=True, index=True)

    def __repr__(self):
        return f"<VocabEntry(id={self.id}, word='{self.word}', course='{self.course}')>"


class Activity(Base):
    """Represents a learning activity made of content blocks."""

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(String(64), nullable=True, index=True)

    contents = relationship(
        "ActivityContent", back_populates="activity", order_by="ActivityContent.id"
    )

    def __repr__(self):
        return f"<Activity(id={self.id}, course='{self.course}')>"


class ActivityContent(Base):
    """
    One content block of an activity.

    Attributes:
        activity_id: Owning activity
        type: Block type, e.g. "example-sentence"
        audio: Audio reference of the block, if it has one
    """

    __tablename__ = "activity_contents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False)
    type = Column(String(64), nullable=False)
    audio = Column(String(255), nullable=True)

    activity = relationship("Activity", back_populates="contents")

    def __repr__(self):
        return f"<ActivityContent(id={self.id}, type='{self.type}', audio='{self.audio}')>"
