from sqlalchemy import Column, Integer, String, Float, Text, DateTime
from sqlalchemy.sql import func

from catering.core.database import Base


class Menu(Base):
    """Catalog entry. Managed by the catalog service; read-only here."""
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    min_headcount = Column(Integer, nullable=False, default=1)
    price_per_person = Column(Float, nullable=False)
    remaining_quantity = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Menu(id={self.id}, title={self.title}, price={self.price_per_person})>"
