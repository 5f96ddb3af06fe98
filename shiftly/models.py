import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Role ids as seeded in the role table
ROLE_OWNER = 1
ROLE_ADMIN = 2
ROLE_MANAGER = 3
ROLE_EMPLOYEE = 4
ROLE_PART_TIME = 5

DEFAULT_ROLES = {
    ROLE_OWNER: "Owner",
    ROLE_ADMIN: "Admin",
    ROLE_MANAGER: "Manager",
    ROLE_EMPLOYEE: "Employee",
    ROLE_PART_TIME: "Part-time",
}


def generate_token():
    """Generate a random invitation token"""
    return str(uuid.uuid4())


class Role(Base):
    __tablename__ = "role"

    role_id = Column(Integer, primary_key=True)
    role_name = Column(String(100), nullable=False)

    employees = relationship("Employee", back_populates="role")


class Store(Base):
    __tablename__ = "store"

    store_id = Column(Integer, primary_key=True, index=True)
    store_name = Column(String(255), nullable=False)
    address_line_1 = Column(String(255), nullable=True)
    address_line_2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    timezone = Column(String(64), nullable=True)  # IANA name, e.g. America/Toronto
    status = Column(String(50), nullable=True)  # geocoded, geocode_failed
    clock_radius_meters = Column(Integer, nullable=True)  # overrides CLOCK_RADIUS_METERS
    created_at = Column(DateTime, server_default=func.now())

    employees = relationship("Employee", back_populates="store")
    shifts = relationship("StoreSchedule", back_populates="store", cascade="all, delete-orphan")


class Employee(Base):
    __tablename__ = "employee"

    employee_id = Column(Integer, primary_key=True, index=True)
    id = Column(String(36), unique=True, index=True, nullable=True)  # Supabase auth user uuid
    email = Column(String(255), unique=True, index=True, nullable=False)
    store_id = Column(Integer, ForeignKey("store.store_id"), nullable=True)
    role_id = Column(Integer, ForeignKey("role.role_id"), nullable=True)
    first_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    preferred_name = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    address_line_1 = Column(String(255), nullable=True)
    address_line_2 = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    profile_photo_path = Column(String(500), nullable=True)  # key in the profile-photo bucket
    salary = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    store = relationship("Store", back_populates="employees")
    role = relationship("Role", back_populates="employees")
    shifts = relationship("StoreSchedule", back_populates="employee", cascade="all, delete-orphan")
    requests = relationship(
        "EmployeeRequest", back_populates="employee", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class SetupToken(Base):
    """Single-use account setup invitation"""

    __tablename__ = "setup_tokens"

    token = Column(String(36), primary_key=True, default=generate_token)
    email = Column(String(255), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("role.role_id"), nullable=False)
    store_id = Column(Integer, ForeignKey("store.store_id"), nullable=False)
    employee_id = Column(Integer, nullable=True)  # optional preassigned employee number
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    used_at = Column(DateTime, nullable=True)


class StoreSchedule(Base):
    __tablename__ = "store_schedule"

    schedule_id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("store.store_id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)  # UTC
    end_time = Column(DateTime, nullable=False)  # UTC
    # [{type, timestamp, latitude, longitude, distance_from_store}]
    time_log = Column(JSON, default=list, nullable=True)

    store = relationship("Store", back_populates="shifts")
    employee = relationship("Employee", back_populates="shifts")


class EmployeeRequest(Base):
    __tablename__ = "employee_request"

    request_id = Column(String(36), primary_key=True, default=generate_token)
    employee_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=False, index=True)
    request_type = Column(String(20), nullable=False)  # availability, time-off, complaint
    request = Column(JSON, nullable=False)
    status = Column(String(20), default="Pending", nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    employee = relationship("Employee", back_populates="requests")


class EmployeeAvailability(Base):
    __tablename__ = "employee_availability"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)


class Activity(Base):
    """Recent activity feed shown on the owner dashboard"""

    __tablename__ = "activity"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    employee_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=True)
    timestamp = Column(DateTime, server_default=func.now(), index=True)
