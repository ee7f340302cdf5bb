"""
CSV export of stored leads
"""

import csv
import io
from typing import Iterable, List

from .models.schemas import BusinessLead
from .config.settings import CSV_COLUMNS


def lead_to_row(lead: BusinessLead) -> List[str]:
    """Flatten a lead into the fixed export column order."""
    return [
        lead.business_name,
        lead.owner_name or "",
        lead.website_status.value,
        str(lead.lead_score),
        lead.contact_email,
        lead.phone_primary or "",
        lead.address,
        lead.city,
        lead.state,
        lead.personal_hook or "",
    ]


def leads_to_csv(leads: Iterable[BusinessLead]) -> str:
    """
    Render leads as CSV: header first, every field quoted, rows separated
    by newlines.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for lead in leads:
        writer.writerow(lead_to_row(lead))
    return buffer.getvalue().rstrip("\n")
