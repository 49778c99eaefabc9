from typing import List, Optional
from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Index, Integer, String, Text, text, Enum
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime


ORDER_STATUSES = ('ACCEPTED', 'ACKNOWLEDGED', 'DELIVERED', 'REJECTED')
OrderStatusEnum = Enum(*ORDER_STATUSES, name='order_status_enum')

class Base(DeclarativeBase):
    pass

class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (Index('idx_users_role', 'role'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    default_hostel_block: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    hostel_floor: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    hostel_room: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    hostel_year: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    hostel_department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, server_default=text("'USER'"))
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )

    orders: Mapped[List['Orders']] = relationship('Orders', back_populates='user')

class MenuItems(Base):
    __tablename__ = 'menu_items'
    __table_args__ = (
        Index('idx_menu_items_category', 'category'),
        Index('idx_menu_items_available', 'is_available'),
    )

    # Deterministic slug, e.g. "chai-small"
    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # rupees
    category_order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text('TRUE'))
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )

class Orders(Base):
    __tablename__ = 'orders'
    __table_args__ = (
        Index('idx_orders_status', 'status'),
        Index('idx_orders_slot_time', 'slot_time'),
        Index('idx_orders_user_created', 'user_id', 'created_at'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False)
    target_hostel_block: Mapped[str] = mapped_column(String(50), nullable=False)
    # Stored in UTC
    slot_time: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(OrderStatusEnum, nullable=False, server_default=text("'ACCEPTED'"))
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )

    user: Mapped['Users'] = relationship('Users', back_populates='orders')
    order_items: Mapped[List['OrderItems']] = relationship(
        'OrderItems', back_populates='order', cascade='all, delete-orphan', passive_deletes=True
    )

class OrderItems(Base):
    __tablename__ = 'order_items'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey('menu_items.id', ondelete='SET NULL'), nullable=True
    )

    # Snapshot values
    menu_item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price_at_order: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped['Orders'] = relationship(
        'Orders',
        back_populates='order_items',
        passive_deletes=True
    )
    menu_item: Mapped[Optional['MenuItems']] = relationship('MenuItems')
