from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.db_setting import Base


class OrderModel(Base):
    __tablename__ = 'orders'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    customer_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    created_at_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False, server_default='USD')

    order_items: Mapped[List['OrderItemModel']] = relationship(
        'OrderItemModel',
        back_populates='order',
        cascade='all, delete-orphan',
        passive_deletes=True,
        lazy='selectin',
    )


class OrderItemModel(Base):
    __tablename__ = 'order_items'
    __table_args__ = (Index('ix_order_items_order_id', 'order_id'),)

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    order_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey('orders.id', ondelete='CASCADE'),
        nullable=False,
    )
    # Soft reference: no foreign key to ticket_types
    ticket_type_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric, nullable=False)

    order: Mapped[OrderModel] = relationship('OrderModel', back_populates='order_items')
