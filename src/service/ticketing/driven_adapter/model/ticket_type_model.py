from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.db_setting import Base


class TicketTypeModel(Base):
    __tablename__ = 'ticket_types'
    __table_args__ = (
        CheckConstraint(
            'available_quantity >= 0 AND available_quantity <= quantity',
            name='ck_ticket_types_available_quantity_range',
        ),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    available_quantity: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
