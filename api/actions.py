"""POST /api/actions: unified mutation endpoint."""

import base64
from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from core.documents import render_contract_pdf
from core.models import CompanyProfileUpdate, ContractDocument, IncomeEntryCreate, InvoiceDraft


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict = {}


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "invoice": InvoiceHandler(services["invoice"]),
        "income": IncomeHandler(services["ledger"]),
        "profile": ProfileHandler(services["profile"]),
        "contract": ContractHandler(services["profile"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data))
        return success_response(result).model_dump(mode="json")

    return router


def _invoice_id(data: dict) -> UUID:
    if "id" not in data:
        raise ValueError("'id' is required")
    try:
        return UUID(str(data["id"]))
    except ValueError:
        raise ValueError(f"Invalid id '{data['id']}'")


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class InvoiceHandler:
    ALLOWED_ACTIONS = {"create", "send", "mark_viewed", "mark_paid"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        invoice = self.service.create_invoice(InvoiceDraft(**data))
        return invoice.model_dump(mode="json")

    def _handle_send(self, data: dict):
        result = self.service.send_invoice(
            _invoice_id(data),
            subject=data.get("subject"),
            message=data.get("message"),
        )
        return result.model_dump(mode="json")

    def _handle_mark_viewed(self, data: dict):
        return self.service.mark_viewed(_invoice_id(data)).model_dump(mode="json")

    def _handle_mark_paid(self, data: dict):
        return self.service.mark_paid(_invoice_id(data)).model_dump(mode="json")


class IncomeHandler:
    ALLOWED_ACTIONS = {"create"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        # Invoice references are reserved for settlement entries
        data.pop("invoice_reference", None)
        entry = self.service.add_entry(IncomeEntryCreate(**data))
        return entry.model_dump(mode="json")


class ProfileHandler:
    ALLOWED_ACTIONS = {"save"}

    def __init__(self, service):
        self.service = service

    def _handle_save(self, data: dict):
        return self.service.save(CompanyProfileUpdate(**data)).model_dump(mode="json")


class ContractHandler:
    ALLOWED_ACTIONS = {"render"}

    def __init__(self, profile_service):
        self.profile_service = profile_service

    def _handle_render(self, data: dict):
        profile = self.profile_service.get()
        if profile is None:
            raise ValueError("Set up your company profile before creating contracts")
        contract = ContractDocument(**data)
        pdf = render_contract_pdf(contract, profile.snapshot())
        return {
            "filename": f"{contract.contract_number}.pdf",
            "content_base64": base64.b64encode(pdf).decode("ascii"),
        }
