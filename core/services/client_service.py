"""
Client service for CRUD operations.

Clients are copied by value into invoices, so updating or deleting a client
never touches existing invoices.
"""

import logging

from core.dual_store import DualBackendStore, WriteResult
from core.models import Client, ClientCreate, ClientUpdate, new_id

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client operations."""

    def __init__(self, store: DualBackendStore):
        self.store = store

    def create(self, data: ClientCreate) -> tuple[Client, WriteResult]:
        """
        Create a new client.

        Args:
            data: Client creation data (name and company required)

        Returns:
            (created client, write result)
        """
        client = Client(id=new_id(), **data.model_dump())
        result = self.store.save_client(client)
        logger.info(f"Created client {client.id} ({client.company})")
        return client, result

    def get_by_id(self, client_id: str) -> Client | None:
        return self.store.get_client(client_id)

    def list_clients(self, search: str | None = None) -> list[Client]:
        """All clients, optionally filtered by a name/company substring."""
        clients = self.store.list_clients()
        if search:
            clients = [c for c in clients if c.matches(search)]
        return clients

    def update(self, client_id: str, data: ClientUpdate) -> tuple[Client, WriteResult | None]:
        """
        Update client fields.

        Args:
            client_id: Client id
            data: Fields to update (only non-None fields are changed)

        Returns:
            (updated client, write result); the result is None when there was
            nothing to change

        Raises:
            ValueError: If client not found
        """
        current = self.get_by_id(client_id)
        if current is None:
            raise ValueError(f"Client {client_id} not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current, None

        client = current.model_copy(update=updates)
        return client, self.store.save_client(client)

    def delete(self, client_id: str) -> WriteResult:
        """
        Delete a client. Invoices keep their embedded copy.

        Raises:
            ValueError: If client not found
        """
        result = self.store.delete_client(client_id)
        logger.info(f"Deleted client {client_id}")
        return result

    def invoice_count(self, client: Client) -> int:
        """Invoices billed to this client, matched by company name."""
        return sum(
            1 for invoice in self.store.list_invoices()
            if invoice.client.company == client.company
        )
