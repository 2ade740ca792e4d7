"""
Application assembly.

`build_services` wires repositories, services and event handlers;
`create_app` mounts them on FastAPI. Run with:

    uvicorn main:create_app_from_environment --factory
"""

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.payments import create_payments_router
from api.base import success_response
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from clients.email_client import EmailApiClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.audit import AuditLogger
from core.config import AppConfig
from core.event_bus import EventBus
from core.handlers.invoice_document_handler import handle_invoice_created
from core.notifications import NotificationGateway
from core.repositories import (
    CounterRepository,
    EmailLogRepository,
    InvoiceRepository,
    LedgerRepository,
    PostgresCounterRepository,
    PostgresEmailLogRepository,
    PostgresInvoiceRepository,
    PostgresLedgerRepository,
    PostgresProfileRepository,
    ProfileRepository,
)
from core.services.invoice_service import InvoiceService
from core.services.ledger_service import LedgerService
from core.services.numbering_service import InvoiceCounter
from core.services.payment_service import PaymentService
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def build_services(
    *,
    invoices: InvoiceRepository,
    counters: CounterRepository,
    ledger: LedgerRepository,
    profiles: ProfileRepository,
    email_logs: EmailLogRepository,
    audit: AuditLogger,
    config: AppConfig,
    email_client: EmailApiClient | None,
    event_bus: EventBus | None = None,
) -> dict:
    """Services keyed by the names the routers look up."""
    event_bus = event_bus or EventBus()
    event_bus.subscribe("InvoiceCreated", handle_invoice_created(config.documents_dir))

    ledger_svc = LedgerService(ledger, audit, event_bus, recent_limit=config.recent_income_limit)
    profile_svc = ProfileService(profiles, audit)
    invoice_svc = InvoiceService(
        invoices=invoices,
        profiles=profiles,
        ledger=ledger_svc,
        counter=InvoiceCounter(counters),
        gateway=NotificationGateway(email_client, email_logs, config),
        audit=audit,
        event_bus=event_bus,
        config=config,
    )
    return {
        "invoice": invoice_svc,
        "ledger": ledger_svc,
        "profile": profile_svc,
        "payment": PaymentService(invoices, invoice_svc),
        "event_bus": event_bus,
    }


def create_app(
    services: dict,
    session_manager: SessionManager,
    auth_service: AuthService,
    auth_config: AuthConfig,
) -> FastAPI:
    app = FastAPI(title="IndiePilot")
    app.add_middleware(AuthMiddleware, session_manager=session_manager)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_auth_router(auth_service, auth_config), prefix="/auth")
    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(create_payments_router(services), prefix="/pay")

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    return app


def create_app_from_environment() -> FastAPI:
    """Production wiring: secrets from Vault, settings from the environment."""
    from clients.vault_client import get_database_url, get_email_config, get_valkey_url

    load_dotenv(Path(__file__).parent / ".env")
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = AppConfig.from_env()
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    email_client = None
    if config.use_real_email:
        email_config = get_email_config()
        email_client = EmailApiClient(email_config["api_url"], email_config["api_key"])
        config = config.model_copy(update={"sender_domain": email_config["sender_domain"]})
    else:
        logger.warning("Real email disabled; invoice emails will be logged as previews")

    services = build_services(
        invoices=PostgresInvoiceRepository(postgres),
        counters=PostgresCounterRepository(postgres),
        ledger=PostgresLedgerRepository(postgres),
        profiles=PostgresProfileRepository(postgres),
        email_logs=PostgresEmailLogRepository(postgres),
        audit=AuditLogger(postgres),
        config=config,
        email_client=email_client,
    )

    auth_config = AuthConfig(app_base_url=config.app_base_url)
    session_manager = SessionManager(valkey, auth_config)
    auth_service = AuthService(
        config=auth_config,
        auth_db=AuthDatabase(postgres),
        session_manager=session_manager,
        rate_limiter=RateLimiter(valkey, auth_config),
        valkey=valkey,
        security_logger=SecurityLogger(postgres),
        email_client=email_client,
    )
    return create_app(services, session_manager, auth_service, auth_config)
