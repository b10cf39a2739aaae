from __future__ import annotations

from datetime import datetime, timezone

from src.school_admin.school_admin.common.numbering import DocumentNumberGenerator, format_document_number
from src.school_admin.school_admin.common.pagination import Page, normalize_page
from src.school_admin.school_admin.common.serialization import camelize
from tests.fakes import FakeDatabase, FakeSequenceRepo


def test_document_number_layout():
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)

    assert format_document_number("INV", 42, at=at) == "INV-1767225600000-0042"


def test_sequences_are_independent_per_prefix_and_branch():
    numbers = DocumentNumberGenerator(FakeSequenceRepo(FakeDatabase()))
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)

    assert numbers.next_document_number("INV", at=at).endswith("-0001")
    assert numbers.next_document_number("INV", at=at).endswith("-0002")
    assert numbers.next_document_number("PAY", at=at).endswith("-0001")
    assert numbers.next_registration_number(branch_id=1) == "REG-B1-00001"
    assert numbers.next_registration_number(branch_id=2) == "REG-B2-00001"
    assert numbers.next_registration_number(branch_id=1) == "REG-B1-00002"


def test_page_counts_pages():
    assert Page.build([1, 2], page=1, limit=2, total=5).pages == 3
    assert normalize_page(0, 1000) == (1, 100)


def test_camelize():
    assert camelize("invoices_needing_fs") == "invoicesNeedingFs"
    assert camelize("total") == "total"
