"""
Field visit model
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Visit(Base):
    """A dated occurrence of a vendor meeting a client, tracked through check-in/check-out.

    Status is not stored: it is derived from check_in_at / check_out_at
    (see fieldsales.domain.visits.service.visit_status).
    """

    __tablename__ = "field_visits"

    id = Column(Integer, primary_key=True, index=True)

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)

    # Check-in
    check_in_at = Column(DateTime, nullable=True)
    check_in_latitude = Column(Float, nullable=True)
    check_in_longitude = Column(Float, nullable=True)
    check_in_address = Column(String(500), nullable=True)

    # Check-out (never without check-in, never earlier than check-in)
    check_out_at = Column(DateTime, nullable=True)
    check_out_latitude = Column(Float, nullable=True)
    check_out_longitude = Column(Float, nullable=True)
    check_out_address = Column(String(500), nullable=True)

    notes = Column(Text, nullable=True)
    inspection_report_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")
    vendor = relationship("Vendor")
