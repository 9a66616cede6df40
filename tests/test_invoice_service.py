"""
Tests for invoice numbering and timestamp handling below the HTTP layer.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from invoicing.models import Client, Invoice, Organization
from invoicing.repositories.user_repo import OrganizationRepository
from invoicing.services.invoice_service import as_utc

from conftest import create_organization, create_user


def make_invoice(org, user, client, number):
    now = datetime.utcnow()
    return Invoice(
        user_id=user.id,
        organization_id=org.id,
        client_id=client.id,
        invoice_number=number,
        issue_date=now,
        due_date=now,
    )


async def add_client(session, org, user):
    client = Client(user_id=user.id, organization_id=org.id, name="Acme", email="acme@example.com")
    session.add(client)
    await session.commit()
    return client


class TestInvoiceSequence:

    async def test_sequence_increments(self, session):
        org = await create_organization(session, "A")
        repo = OrganizationRepository(session)
        assert await repo.next_invoice_sequence(org.id) == 1
        assert await repo.next_invoice_sequence(org.id) == 2

    async def test_sequence_rereads_a_stale_organization(self, session, session_factory):
        org = await create_organization(session, "A")
        await session.commit()
        assert org.invoice_sequence == 0

        # another request reserved numbers in the meantime
        async with session_factory() as other:
            fresh = await other.get(Organization, org.id)
            fresh.invoice_sequence = 41
            other.add(fresh)
            await other.commit()

        assert await OrganizationRepository(session).next_invoice_sequence(org.id) == 42


class TestInvoiceNumberUniqueness:

    async def test_duplicate_number_in_organization_rejected(self, session):
        user = await create_user(session, "user@example.com")
        org = await create_organization(session, "A")
        client = await add_client(session, org, user)

        session.add(make_invoice(org, user, client, "INV-20240001"))
        await session.commit()

        session.add(make_invoice(org, user, client, "INV-20240001"))
        with pytest.raises(IntegrityError):
            await session.commit()

    async def test_same_number_allowed_across_organizations(self, session):
        user = await create_user(session, "user@example.com")
        first = await create_organization(session, "A")
        second = await create_organization(session, "B")
        first_client = await add_client(session, first, user)
        second_client = await add_client(session, second, user)

        session.add(make_invoice(first, user, first_client, "INV-20240001"))
        session.add(make_invoice(second, user, second_client, "INV-20240001"))
        await session.commit()


class TestAsUtc:

    def test_naive_values_pass_through(self):
        value = datetime(2024, 3, 1, 12, 0)
        assert as_utc(value) == value
        assert as_utc(None) is None

    def test_aware_values_become_naive_utc(self):
        value = datetime(2024, 3, 1, 1, 30, tzinfo=timezone(timedelta(hours=2)))
        converted = as_utc(value)
        assert converted.tzinfo is None
        assert converted == datetime(2024, 2, 29, 23, 30)

    def test_utc_values_keep_wall_clock(self):
        value = datetime(2024, 3, 1, 22, 30, tzinfo=timezone.utc)
        assert as_utc(value) == datetime(2024, 3, 1, 22, 30)
