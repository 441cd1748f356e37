"""
ORM declarations for the three invoice tables.

The analytics pipeline only reads these tables through raw SQL, so nothing in
the service imports this module at runtime. Base.metadata built from it is
what the test suite and schema tooling use to create the store.
"""

from sqlalchemy import (
    Column,
    Computed,
    Date,
    ForeignKey,
    Integer,
    String,
    Numeric,
    TIMESTAMP,
    Text,
    JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from invoice_analytics.core.database import Base


# =========================
# Customer (buyer)
# =========================
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(Text, nullable=False)
    address = Column(Text)
    phone = Column(Text)
    email = Column(Text)
    tax_id = Column(Text)  # VAT/TIN number

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    invoices = relationship("Invoice", back_populates="customer")


# =========================
# Invoice (main document)
# =========================
class Invoice(Base):
    """
    One issued invoice.

    total is expected to equal subtotal - discount + tax + shipping,
    see schemas.totals_match for the check applied on creation.
    """

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)

    invoice_number = Column(String(50), nullable=False, unique=True)  # "INV-2025-0001"
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date)

    customer_id = Column(
        Integer,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, server_default="0")
    tax = Column(Numeric(12, 2), nullable=False, server_default="0")
    shipping = Column(Numeric(12, 2), nullable=False, server_default="0")
    total = Column(Numeric(12, 2), nullable=False)

    payment_terms = Column(Text)  # "Net 30"
    payment_method = Column(Text)  # "Bank Transfer", "Credit Card"
    bank_details = Column(JSON().with_variant(JSONB(), "postgresql"))

    notes = Column(Text)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    customer = relationship("Customer", back_populates="invoices")

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# =========================
# InvoiceItem (line items)
# =========================
class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)

    invoice_id = Column(
        Integer,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    description = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False, server_default="1")
    unit_price = Column(Numeric(12, 2), nullable=False)

    # Always derived by the database, never written by the application
    line_total = Column(Numeric(14, 2), Computed("quantity * unit_price", persisted=True))

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    invoice = relationship("Invoice", back_populates="items")
