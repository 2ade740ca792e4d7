"""Public mock payment endpoints reached from the emailed payment link."""

from uuid import UUID

from fastapi import APIRouter

from api.base import success_response
from core.services.payment_service import CardPayment


def create_payments_router(services: dict) -> APIRouter:
    router = APIRouter()
    payment_svc = services["payment"]

    @router.get("/invoices/{invoice_id}")
    async def get_invoice(invoice_id: UUID):
        invoice = payment_svc.get_public_invoice(invoice_id)
        return success_response(invoice.model_dump(mode="json")).model_dump(mode="json")

    @router.post("/invoices/{invoice_id}")
    async def pay_invoice(invoice_id: UUID, body: CardPayment):
        receipt = payment_svc.pay(invoice_id, body)
        return success_response(receipt.model_dump(mode="json")).model_dump(mode="json")

    return router
