"""Pydantic schemas for tasks, employees and expenses."""

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TaskPriority = Literal["low", "medium", "high"]
EmployeeStatus = Literal["active", "inactive"]


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    priority: TaskPriority = "medium"
    due: datetime.datetime


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1)
    priority: TaskPriority | None = None
    due: datetime.datetime | None = None
    completed: bool | None = None


class EmployeeCreate(BaseModel):
    """New employee record; JSON field names follow the admin UI (camelCase)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None
    position: str = Field(..., min_length=1)
    department: str | None = None
    joining_date: datetime.date = Field(..., alias="joiningDate")
    salary: float | None = Field(None, ge=0)
    address: str | None = None
    status: EmployeeStatus = "active"


class EmployeeUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, min_length=1)
    email: str | None = Field(None, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = None
    position: str | None = None
    department: str | None = None
    joining_date: datetime.date | None = Field(None, alias="joiningDate")
    salary: float | None = Field(None, ge=0)
    address: str | None = None
    status: EmployeeStatus | None = None


class ExpenseCreate(BaseModel):
    title: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: datetime.date
