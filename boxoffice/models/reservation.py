import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, Uuid, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from boxoffice.db.session import Base

class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("tickets > 0", name="ck_reservations_tickets"),
        # One record per claimant per showing; repeat claims merge into it
        UniqueConstraint("showing_id", "customer_name", name="uq_reservations_showing_customer"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    showing_id = Column(Uuid, ForeignKey("showings.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    tickets = Column(Integer, nullable=False)

    showing = relationship("Showing", back_populates="reservations")
