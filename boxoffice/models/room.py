from sqlalchemy import Column, String, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from boxoffice.db.session import Base

class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (CheckConstraint("capacity >= 0", name="ck_rooms_capacity"),)

    id = Column(String(50), primary_key=True)  # stable code, e.g. "HALL-1"
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)

    # Relationships
    showings = relationship("Showing", back_populates="room", passive_deletes=True)
