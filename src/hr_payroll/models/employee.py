"""User (identity) and Employee (payroll profile) models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from hr_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_payroll.models.reference import Department, Role


class User(Base, TimestampMixin):
    """Identity record. Owns zero or one Employee."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    dept_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=False,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
    )
    designation: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_joining: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Active")

    __table_args__ = (
        CheckConstraint("status IN ('Active', 'Inactive')", name="users_status_check"),
    )

    # Relationships
    role: Mapped[Role] = relationship()
    department: Mapped[Department] = relationship()
    employee: Mapped[Employee | None] = relationship(back_populates="user", uselist=False)

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class Employee(Base, TimestampMixin):
    """Payroll-eligible profile linked to exactly one User."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
    )
    dept_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=False,
    )
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bank_account: Mapped[str] = mapped_column(String(64), nullable=False)
    date_joined: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Active")

    __table_args__ = (
        CheckConstraint("salary >= 0", name="employees_salary_non_negative"),
        CheckConstraint("status IN ('Active', 'Inactive')", name="employees_status_check"),
    )

    # Relationships
    user: Mapped[User] = relationship(back_populates="employee")
    role: Mapped[Role] = relationship()
    department: Mapped[Department] = relationship()

    @validates("user_id")
    def _validate_user_id(self, key: str, value: int) -> int:
        """user_id is fixed once assigned."""
        current = self.__dict__.get("user_id")
        if current is not None and value != current:
            raise ValueError(
                f"Employee {self.id} is bound to user {current}; user_id cannot change"
            )
        return value

    @property
    def is_active(self) -> bool:
        return self.status == "Active"
