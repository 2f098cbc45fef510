import uuid

from sqlalchemy import Column, ForeignKey, Integer, Numeric, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def generate_id() -> str:
    return str(uuid.uuid4())


class Businesses(Base):
    __tablename__ = 'businesses'

    id = Column(Text, primary_key=True, default=generate_id)
    business_name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    address = Column(Text)
    whatsapp = Column(Text)
    box_capacity = Column(Integer, nullable=False, server_default=text('5'))
    patio_capacity = Column(Integer, nullable=False, server_default=text('15'))
    slot_interval_minutes = Column(Integer, nullable=False, server_default=text('30'))
    # JSON lists: [{"day_of_week", "is_open", "open_time", "close_time"}], [{"date", "reason"}]
    operating_days = Column(Text, nullable=False, server_default=text("'[]'"))
    blocked_dates = Column(Text, nullable=False, server_default=text("'[]'"))
    timezone = Column(Text)
    online_booking_enabled = Column(Integer, nullable=False, server_default=text('1'))
    loyalty_program_enabled = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    service_bays = relationship('ServiceBays', back_populates='business')
    services = relationship('Services', back_populates='business')
    customers = relationship('Customers', back_populates='business')
    appointments = relationship('Appointments', back_populates='business')
    expenses = relationship('Expenses', back_populates='business')


class ServiceBays(Base):
    __tablename__ = 'service_bays'

    id = Column(Text, primary_key=True, default=generate_id)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    business = relationship('Businesses', back_populates='service_bays')
    appointments = relationship('Appointments', back_populates='box')


class Services(Base):
    __tablename__ = 'services'

    id = Column(Text, primary_key=True, default=generate_id)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    business = relationship('Businesses', back_populates='services')
    appointments = relationship('Appointments', back_populates='service')


class Customers(Base):
    __tablename__ = 'customers'
    __table_args__ = (
        # Phone is the natural key for dedupe within a business
        UniqueConstraint('business_id', 'phone', name='uq_customers_business_phone'),
    )

    id = Column(Text, primary_key=True, default=generate_id)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False, index=True)
    email = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='customers')
    vehicles = relationship('Vehicles', back_populates='customer', cascade='all, delete-orphan')
    appointments = relationship('Appointments', back_populates='customer')


class Vehicles(Base):
    __tablename__ = 'vehicles'

    id = Column(Text, primary_key=True, default=generate_id)
    customer_id = Column(ForeignKey('customers.id', ondelete='CASCADE'), nullable=False)
    brand = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    plate = Column(Text, nullable=False)
    color = Column(Text)
    type = Column(Text, nullable=False, server_default=text("'CARRO'"))

    customer = relationship('Customers', back_populates='vehicles')
    appointments = relationship('Appointments', back_populates='vehicle')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        # One row per occupied seat; NULL ordinals (cancelled) never collide
        UniqueConstraint('business_id', 'date', 'time', 'slot_ordinal'),
    )

    id = Column(Text, primary_key=True, default=generate_id)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    customer_id = Column(ForeignKey('customers.id', ondelete='SET NULL'))
    vehicle_id = Column(ForeignKey('vehicles.id', ondelete='SET NULL'))
    service_id = Column(ForeignKey('services.id'))
    box_id = Column(ForeignKey('service_bays.id', ondelete='SET NULL'))
    service_type = Column(Text, nullable=False)
    date = Column(Text, nullable=False)
    time = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(Text, nullable=False, server_default=text("'NOVO'"))
    slot_ordinal = Column(Integer)
    observation = Column(Text)
    cancellation_reason = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Businesses', back_populates='appointments')
    customer = relationship('Customers', back_populates='appointments')
    vehicle = relationship('Vehicles', back_populates='appointments')
    service = relationship('Services', back_populates='appointments')
    box = relationship('ServiceBays', back_populates='appointments')


class Expenses(Base):
    __tablename__ = 'expenses'

    id = Column(Text, primary_key=True, default=generate_id)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Text, nullable=False)
    category = Column(Text, nullable=False, server_default=text("'FIXO'"))
    type = Column(Text, nullable=False, server_default=text("'DESPESA'"))
    payment_method = Column(Text)

    business = relationship('Businesses', back_populates='expenses')
