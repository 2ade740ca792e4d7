"""GET /api/data: unified read endpoint."""

from uuid import UUID

from fastapi import APIRouter, Query, Request
from starlette.responses import Response

from api.base import success_response
from core.documents import render_invoice_pdf
from core.models import InvoiceFilter

VALID_TYPES = {"invoices", "income", "profile", "dashboard", "email_logs"}


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    invoice_svc = services["invoice"]
    ledger_svc = services["ledger"]
    profile_svc = services["profile"]

    # Registered before the generic /data route

    @router.get("/data/invoices/{invoice_id}/pdf")
    async def invoice_pdf(invoice_id: UUID):
        invoice = invoice_svc.require(invoice_id)
        return Response(
            content=render_invoice_pdf(invoice),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{invoice.invoice_number}.pdf"'},
        )

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        filter: str | None = Query(None),
        limit: int | None = Query(None, ge=1, le=100),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")
        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        if type == "invoices":
            return _handle_invoices(invoice_svc, id, filter)
        if type == "income":
            return _handle_income(ledger_svc, limit)
        if type == "profile":
            profile = profile_svc.get()
            return success_response(profile.model_dump(mode="json") if profile else None).model_dump(mode="json")
        if type == "dashboard":
            return _handle_dashboard(invoice_svc, ledger_svc)
        if type == "email_logs":
            if not id:
                raise ValueError("'email_logs' type requires 'id' parameter (invoice id)")
            logs = invoice_svc.delivery_history(_parse_uuid(id))
            return success_response([log.model_dump(mode="json") for log in logs]).model_dump(mode="json")

    return router


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValueError(f"Invalid id '{value}'")


def _handle_invoices(invoice_svc, id, filter):
    if id:
        invoice = invoice_svc.require(_parse_uuid(id))
        return success_response(invoice.model_dump(mode="json")).model_dump(mode="json")

    try:
        invoice_filter = InvoiceFilter(filter or "all")
    except ValueError:
        raise ValueError(f"Unknown filter '{filter}'. Use all, pending or paid")

    invoices = invoice_svc.list_invoices(invoice_filter)
    summary = invoice_svc.summary()
    return success_response({
        "invoices": [i.model_dump(mode="json") for i in invoices],
        "summary": summary.model_dump(mode="json"),
    }).model_dump(mode="json")


def _handle_income(ledger_svc, limit):
    entries = ledger_svc.list_recent(limit)
    return success_response({
        "entries": [e.model_dump(mode="json") for e in entries],
        "total": str(ledger_svc.total_income()),
    }).model_dump(mode="json")


def _handle_dashboard(invoice_svc, ledger_svc):
    summary = invoice_svc.summary()
    return success_response({
        "total_income": str(ledger_svc.total_income()),
        "invoice_count": summary.total_count,
        "invoices": summary.model_dump(mode="json"),
        "recent_income": [e.model_dump(mode="json") for e in ledger_svc.list_recent()],
    }).model_dump(mode="json")
