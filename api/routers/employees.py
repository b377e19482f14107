"""Employee CRUD, export, template and import endpoints."""
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse, Response

import employee_files
from api.dependencies import get_notifier, get_store
from api.models import EmployeeCreate, EmployeeUpdate
from api.responses import success
from api.store import EmployeeStore
from config import MAX_UPLOAD_BYTES
from employee_import import ImportOutcome, run_import
from errors import DuplicateError, NotFoundError, ValidationError
from logger_config import setup_logger
from notifications import EmailNotifier

router = APIRouter()
logger = setup_logger(__name__)

INVALID_FORMAT_MESSAGE = "Invalid file format. Only CSV and Excel files are allowed"


def _get_or_404(store: EmployeeStore, employee_id: int):
    employee = store.find_by_id(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found", detail={"id": employee_id})
    return employee


def _dispatch_import_notifications(
    background: BackgroundTasks, notifier: EmailNotifier, outcome: ImportOutcome
) -> None:
    """Queue welcome mails and the admin summary; they run after the response is sent."""
    if not notifier.is_ready:
        return
    for employee in outcome.created:
        background.add_task(notifier.send_welcome, employee.email, employee.name)
    if notifier.admin_email:
        background.add_task(notifier.send_import_summary, notifier.admin_email, outcome.summary())


def _import_response(
    rows: list[dict[str, Any]],
    store: EmployeeStore,
    notifier: EmailNotifier,
    background: BackgroundTasks,
    source: str,
):
    outcome = run_import(rows, store)
    logger.info(f"{source} import: {outcome.imported} imported, {outcome.failed} failed")
    _dispatch_import_notifications(background, notifier, outcome)
    return success(outcome.to_dict(), outcome.message())


def _read_upload(kind: str, file: UploadFile | None) -> list[dict[str, Any]]:
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    if not employee_files.is_accepted_upload(kind, file.filename, file.content_type):
        raise ValidationError(INVALID_FORMAT_MESSAGE, detail={"filename": file.filename})

    content = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        limit_mb = MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB")
    return employee_files.parse_rows(kind, content)


# =====================================================================
# EXPORT / TEMPLATES (static paths before /{employee_id})
# =====================================================================

def _export(kind: str, store: EmployeeStore) -> Response:
    employees = store.find_all()
    if kind == "csv":
        content = employee_files.export_csv_bytes(employees)
    else:
        content = employee_files.export_excel_bytes(employees)
    filename = employee_files.export_filename(kind)
    logger.info(f"Exported {len(employees)} employees to {filename}")
    return Response(
        content=content,
        media_type=employee_files.FILE_KINDS[kind]["download_type"],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/csv")
def export_csv(store: EmployeeStore = Depends(get_store)):
    return _export("csv", store)


@router.get("/export/excel")
def export_excel(store: EmployeeStore = Depends(get_store)):
    return _export("excel", store)


@router.get("/template/csv")
def download_template_csv():
    path = employee_files.template_path("csv")
    return FileResponse(path, media_type=employee_files.CSV_MEDIA_TYPE, filename=path.name)


@router.get("/template/excel")
def download_template_excel():
    path = employee_files.template_path("excel")
    return FileResponse(path, media_type=employee_files.EXCEL_MEDIA_TYPE, filename=path.name)


# =====================================================================
# IMPORT
# =====================================================================

@router.post("/import/csv")
def import_csv(
    background: BackgroundTasks,
    file: UploadFile | None = File(None),
    store: EmployeeStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
):
    rows = _read_upload("csv", file)
    return _import_response(rows, store, notifier, background, "CSV")


@router.post("/import/excel")
def import_excel(
    background: BackgroundTasks,
    file: UploadFile | None = File(None),
    store: EmployeeStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
):
    rows = _read_upload("excel", file)
    return _import_response(rows, store, notifier, background, "Excel")


@router.post("/import/json")
def import_json(
    background: BackgroundTasks,
    rows: list[dict[str, Any]] = Body(...),
    store: EmployeeStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
):
    if not rows:
        raise ValidationError("Import payload cannot be empty")
    return _import_response(rows, store, notifier, background, "JSON")


# =====================================================================
# CRUD
# =====================================================================

@router.get("")
def list_employees(
    name: str | None = Query(None, description="Case-insensitive substring of the employee name"),
    store: EmployeeStore = Depends(get_store),
):
    return success(store.find_all(name), "Employees retrieved successfully")


@router.get("/{employee_id}")
def get_employee(employee_id: int, store: EmployeeStore = Depends(get_store)):
    return success(_get_or_404(store, employee_id), "Employee retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_employee(
    body: EmployeeCreate,
    background: BackgroundTasks,
    store: EmployeeStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
):
    if store.find_by_email(body.email) is not None:
        raise DuplicateError(body.email)

    employee = store.insert(body)
    logger.info(f"Employee {employee.id} created")
    if notifier.is_ready:
        background.add_task(notifier.send_welcome, employee.email, employee.name)
    return success(employee, "Employee created successfully", status.HTTP_201_CREATED)


@router.put("/{employee_id}")
def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    store: EmployeeStore = Depends(get_store),
):
    changes = body.changes()
    if not changes:
        raise ValidationError("Update payload cannot be empty")

    _get_or_404(store, employee_id)
    if "email" in changes:
        owner = store.find_by_email(changes["email"])
        if owner is not None and owner.id != employee_id:
            raise DuplicateError(changes["email"])

    employee = store.update(employee_id, changes)
    if employee is None:
        raise NotFoundError("Employee not found", detail={"id": employee_id})
    logger.info(f"Employee {employee_id} updated: {', '.join(sorted(changes))}")
    return success(employee, "Employee updated successfully")


@router.delete("/{employee_id}")
def delete_employee(employee_id: int, store: EmployeeStore = Depends(get_store)):
    if not store.delete(employee_id):
        raise NotFoundError("Employee not found", detail={"id": employee_id})
    logger.info(f"Employee {employee_id} deleted")
    return success(None, "Employee deleted successfully")
