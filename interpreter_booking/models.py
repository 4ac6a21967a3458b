import enum
import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a string document id"""
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"
    INTERPRETER = "INTERPRETER"


class BookingStatus(str, enum.Enum):
    REQUESTED = "REQUESTED"
    OFFERED = "OFFERED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    INVOICED = "INVOICED"
    PAID = "PAID"


class AssignmentStatus(str, enum.Enum):
    OFFERED = "OFFERED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    # Display-only; nothing transitions an assignment here
    EXPIRED = "EXPIRED"


class ServiceType(str, enum.Enum):
    FACE_TO_FACE = "Face-to-Face"
    VIDEO = "Video Remote"
    TELEPHONE = "Telephone"
    TRANSLATION = "Translation"
    BSL = "BSL"


class RateType(str, enum.Enum):
    CLIENT = "CLIENT"
    INTERPRETER = "INTERPRETER"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False)  # ADMIN, CLIENT, INTERPRETER
    # Client id for CLIENT users, interpreter id for INTERPRETER users
    profile_id = Column(String(36), nullable=True, index=True)
    status = Column(String(20), default="ACTIVE", nullable=False)  # ACTIVE, SUSPENDED
    created_at = Column(DateTime, server_default=func.now())


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_name = Column(String(255), nullable=False)
    billing_address = Column(Text, nullable=True)
    payment_terms_days = Column(Integer, default=30, nullable=False)
    contact_person = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    default_cost_code_type = Column(String(20), nullable=True)  # PO, ICS, Cost Code
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Interpreter(Base):
    __tablename__ = "interpreters"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    languages = Column(JSON, default=list, nullable=False)
    regions = Column(JSON, default=list, nullable=False)
    qualifications = Column(JSON, default=list, nullable=False)
    status = Column(String(20), default="ONBOARDING", nullable=False)  # ACTIVE, ONBOARDING, SUSPENDED
    is_available = Column(Boolean, default=True, nullable=False)
    dbs_expiry = Column(Date, nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
    unavailable_dates = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Booking(Base):
    """A request for an interpreter at a specific date, time and location"""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_ref = Column(String(20), nullable=True, index=True)  # LL-1234
    client_id = Column(String(36), nullable=True, index=True)  # null for guest bookings
    client_name = Column(String(255), nullable=True)
    requested_by_user_id = Column(String(36), nullable=True)
    guest_contact = Column(JSON, nullable=True)

    service_type = Column(String(50), nullable=False)
    language_from = Column(String(100), nullable=False)
    language_to = Column(String(100), nullable=False)

    # Scheduling
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM format
    duration_minutes = Column(Integer, nullable=False)
    expected_end_time = Column(String(5), nullable=True)

    # Location
    location_type = Column(String(10), nullable=False)  # ONLINE, ONSITE
    address = Column(Text, nullable=True)
    postcode = Column(String(20), nullable=True)
    online_link = Column(String(500), nullable=True)

    # Status workflow: REQUESTED → OFFERED → CONFIRMED → COMPLETED → INVOICED → PAID
    # REQUESTED/OFFERED may also move to CANCELLED (never hard-deleted)
    status = Column(String(20), default=BookingStatus.REQUESTED.value, nullable=False, index=True)

    cost_code = Column(String(100), nullable=True)
    case_type = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    gender_preference = Column(String(10), nullable=True)  # Male, Female, None

    interpreter_id = Column(String(36), nullable=True, index=True)
    interpreter_name = Column(String(255), nullable=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}


class BookingAssignment(Base):
    """An offer of one booking to one interpreter"""

    __tablename__ = "assignments"

    id = Column(String(36), primary_key=True, default=generate_id)
    booking_id = Column(String(36), nullable=False, index=True)
    interpreter_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), default=AssignmentStatus.OFFERED.value, nullable=False, index=True)
    offered_at = Column(DateTime, nullable=False)
    responded_at = Column(DateTime, nullable=True)
    booking_snapshot = Column(JSON, nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class Rate(Base):
    __tablename__ = "rates"

    id = Column(String(36), primary_key=True, default=generate_id)
    rate_type = Column(String(20), nullable=False, index=True)  # CLIENT, INTERPRETER
    service_type = Column(String(50), nullable=False, index=True)
    amount_per_unit = Column(Float, nullable=False)
    minimum_units = Column(Float, default=1, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
