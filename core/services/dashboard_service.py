"""Dashboard figures derived from the invoice collection."""

from collections import Counter

from core.calculator import invoice_total
from core.dual_store import DualBackendStore
from core.models import Invoice, InvoiceStatus
from utils.timezone import parse_day

RECENT_INVOICE_COUNT = 5


class DashboardService:
    """Read-only aggregates for the dashboard view."""

    def __init__(self, store: DualBackendStore):
        self.store = store

    def summary(self) -> dict:
        """
        Revenue (PAID), outstanding (PENDING), counts per status, monthly PAID
        revenue keyed by month abbreviation, and the most recent invoices.
        """
        invoices = self.store.list_invoices()

        return {
            "totalRevenue": sum(invoice_total(i) for i in invoices if i.status == InvoiceStatus.PAID),
            "outstanding": sum(invoice_total(i) for i in invoices if i.status == InvoiceStatus.PENDING),
            "statusCounts": self.status_counts(invoices),
            "monthlyRevenue": self.monthly_revenue(invoices),
            "recentInvoices": [
                {
                    "id": i.id,
                    "invoiceNumber": i.invoice_number,
                    "client": i.client.company or i.client.name,
                    "date": i.date,
                    "status": i.status.value,
                    "total": invoice_total(i),
                }
                for i in self.recent(invoices)
            ],
        }

    def status_counts(self, invoices: list[Invoice]) -> dict[str, int]:
        counts = Counter(i.status.value for i in invoices)
        return {status.value: counts.get(status.value, 0) for status in InvoiceStatus}

    def monthly_revenue(self, invoices: list[Invoice]) -> list[dict]:
        """PAID totals per month ('Jan', 'Feb', ...), in first-seen order."""
        monthly: dict[str, float] = {}
        for invoice in invoices:
            if invoice.status != InvoiceStatus.PAID:
                continue
            day = parse_day(invoice.date)
            if day is None:
                continue
            month = day.strftime("%b")
            monthly[month] = monthly.get(month, 0) + invoice_total(invoice)
        return [{"name": month, "amount": amount} for month, amount in monthly.items()]

    def recent(self, invoices: list[Invoice]) -> list[Invoice]:
        """Newest first by invoice date; undated invoices sort last."""
        dated = sorted(
            invoices,
            key=lambda i: (parse_day(i.date) is not None, i.date),
            reverse=True,
        )
        return dated[:RECENT_INVOICE_COUNT]
