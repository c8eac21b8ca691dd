"""
Customer contact import from CSV (name,phone)

Customers are matched on the canonical +251 phone first, then on the legacy
251 / 0 / bare national forms, and stored with the canonical phone.
"""
import csv
import io
import logging
from dataclasses import dataclass

from django.db import transaction

from accounts.identity import COUNTRY_CODE, normalize_phone, with_plus_country_code
from accounts.models import Customer

logger = logging.getLogger(__name__)


@dataclass
class ContactImportResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0

    def summary_message(self) -> str:
        return (
            f"Contact import complete. Created: {self.created}, "
            f"Updated: {self.updated}, Skipped: {self.skipped}."
        )


def _find_customer(canonical_phone, normalized):
    customer = Customer.objects.filter(phone=canonical_phone).first()
    if customer:
        return customer
    return Customer.objects.filter(
        phone__in=[f"{COUNTRY_CODE}{normalized}", f"0{normalized}", normalized]
    ).first()


def _is_header(line_number, name, phone):
    return line_number == 1 and name.lower() == 'name' and phone.lower() == 'phone'


def import_contacts(uploaded_file) -> ContactImportResult:
    """Create or update customers from an uploaded CSV file"""
    text = uploaded_file.read().decode('utf-8-sig')
    return import_contact_rows(csv.reader(io.StringIO(text)))


@transaction.atomic
def import_contact_rows(rows) -> ContactImportResult:
    result = ContactImportResult()

    for line_number, row in enumerate(rows, start=1):
        if len(row) < 2:
            result.skipped += 1
            continue

        name = row[0].strip()
        phone = row[1].strip()
        if _is_header(line_number, name, phone):
            continue

        normalized = normalize_phone(phone)
        if not normalized:
            result.skipped += 1
            continue

        canonical_phone = with_plus_country_code(normalized)
        customer = _find_customer(canonical_phone, normalized)
        if customer is None:
            customer = Customer()
            result.created += 1
        else:
            result.updated += 1

        customer.phone = canonical_phone
        customer.name = name or f"Customer {normalized[-4:]}"
        customer.save()

    logger.info(result.summary_message())
    return result
