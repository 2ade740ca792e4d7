# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_valkey_url,
    get_email_config,
)
from clients.postgres_client import DatabaseUnavailableError, PostgresClient
from clients.valkey_client import ValkeyClient
from clients.email_client import (
    EmailApiClient,
    EmailAttachment,
    EmailGatewayError,
    OutboundEmail,
)
