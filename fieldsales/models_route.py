"""
Weekly route models
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Route(Base):
    """A vendor's named set of client stops distributed across weekdays"""

    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    # At most one active route per vendor (checked by RouteService)
    active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="routes")
    stops = relationship(
        "RouteStop",
        back_populates="route",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RouteStop.position",
    )


class RouteStop(Base):
    """One (client, weekday, position) assignment within a route"""

    __tablename__ = "route_stops"
    __table_args__ = (
        UniqueConstraint("route_id", "weekday", "client_id", name="uq_route_stop_client_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    route_id = Column(
        Integer, ForeignKey("routes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    weekday = Column(String(20), nullable=False)  # MONDAY..SATURDAY
    position = Column(Integer, nullable=False)  # 1-based, unique per (route, weekday)

    created_at = Column(DateTime, server_default=func.now())

    route = relationship("Route", back_populates="stops")
    client = relationship("Client")
