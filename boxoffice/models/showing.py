import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from boxoffice.db.session import Base

class Showing(Base):
    __tablename__ = "showings"
    __table_args__ = (CheckConstraint("duration_min > 0", name="ck_showings_duration"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, index=True)
    start_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    duration_min = Column(Integer, nullable=False)
    room_id = Column(String(50), ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Relationships
    room = relationship("Room", back_populates="showings")
    reservations = relationship(
        "Reservation",
        back_populates="showing",
        cascade="all, delete-orphan",
        order_by="Reservation.customer_name",
    )
