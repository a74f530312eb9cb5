from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String

from bunktrack.database.db import Base


class SubjectRecord(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_subjects_total"),
        CheckConstraint("attended >= 0", name="ck_subjects_attended"),
        CheckConstraint(
            "required_percent > 0 AND required_percent <= 100",
            name="ck_subjects_required_percent",
        ),
    )

    # seq keeps creation order; id is the public identifier
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False)
    subject_name = Column(String(200), nullable=False)
    total = Column(Integer, nullable=False)
    attended = Column(Integer, nullable=False)
    required_percent = Column(Float, nullable=False, default=75)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
