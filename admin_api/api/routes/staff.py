"""Back-office task list, employee directory and expense ledger."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status

from admin_api.adapters.store.base import DESCENDING, AbstractDocumentStore
from admin_api.api.dependencies import get_store
from admin_api.core.errors import NotFoundAppError
from admin_api.core.response_cache import cached, invalidate_cache
from admin_api.schemas.staff import (
    EmployeeCreate,
    EmployeeUpdate,
    ExpenseCreate,
    TaskCreate,
    TaskUpdate,
)

router = APIRouter(tags=["Staff"])

STAFF_TTL_SECONDS = 30

Store = Annotated[AbstractDocumentStore, Depends(get_store)]


def _not_found(resource: str, label: str, document_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code=f"{label.lower()}_not_found",
        message=f"{label} not found",
        details={"resource": resource, "resource_id": document_id},
    )


# Tasks


@router.get("/tasks")
@cached(ttl_seconds=STAFF_TTL_SECONDS)
async def list_tasks(request: Request, store: Store) -> list[dict[str, Any]]:
    return await store.list("tasks")


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, request: Request, store: Store) -> dict[str, Any]:
    task = await store.insert("tasks", {**body.model_dump(mode="json"), "completed": False})
    invalidate_cache(request, "/api/tasks")
    return {"message": "Task added successfully", "task": task}


@router.put("/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, request: Request, store: Store) -> dict[str, Any]:
    task = await store.update("tasks", task_id, body.model_dump(mode="json", exclude_none=True))
    if task is None:
        raise _not_found("tasks", "Task", task_id)
    invalidate_cache(request, "/api/tasks")
    return {"message": "Task updated successfully", "task": task}


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, request: Request, store: Store) -> dict[str, Any]:
    if await store.delete("tasks", task_id) is None:
        raise _not_found("tasks", "Task", task_id)
    invalidate_cache(request, "/api/tasks")
    return {"message": "Task deleted successfully", "deletedId": task_id}


# Employees


@router.get("/employees")
@cached(ttl_seconds=STAFF_TTL_SECONDS)
async def list_employees(request: Request, store: Store) -> list[dict[str, Any]]:
    return await store.list("employees", sort=[("createdAt", DESCENDING)])


@router.post("/employees", status_code=status.HTTP_201_CREATED)
async def create_employee(body: EmployeeCreate, request: Request, store: Store) -> dict[str, Any]:
    employee = await store.insert("employees", body.model_dump(mode="json", by_alias=True))
    invalidate_cache(request, "/api/employees")
    return {"message": "Employee added", "employee": employee}


@router.put("/employees/{employee_id}")
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    request: Request,
    store: Store,
) -> dict[str, Any]:
    changes = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    employee = await store.update("employees", employee_id, changes)
    if employee is None:
        raise _not_found("employees", "Employee", employee_id)
    invalidate_cache(request, "/api/employees")
    return {"message": "Employee updated", "employee": employee}


@router.delete("/employees/{employee_id}")
async def delete_employee(employee_id: str, request: Request, store: Store) -> dict[str, Any]:
    if await store.delete("employees", employee_id) is None:
        raise _not_found("employees", "Employee", employee_id)
    invalidate_cache(request, "/api/employees")
    return {"message": "Employee deleted", "deletedId": employee_id}


# Expenses


@router.get("/expenses")
@cached(ttl_seconds=STAFF_TTL_SECONDS)
async def list_expenses(request: Request, store: Store) -> list[dict[str, Any]]:
    return await store.list("expenses", sort=[("date", DESCENDING)])


@router.post("/expenses", status_code=status.HTTP_201_CREATED)
async def create_expense(body: ExpenseCreate, request: Request, store: Store) -> dict[str, Any]:
    expense = await store.insert("expenses", body.model_dump(mode="json"))
    invalidate_cache(request, "/api/expenses")
    return {"message": "Expense added successfully", "expense": expense}


@router.delete("/expenses/{expense_id}")
async def delete_expense(expense_id: str, request: Request, store: Store) -> dict[str, Any]:
    if await store.delete("expenses", expense_id) is None:
        raise _not_found("expenses", "Expense", expense_id)
    invalidate_cache(request, "/api/expenses")
    return {"message": "Expense deleted successfully", "deletedId": expense_id}
