"""
Tests for policy evaluation on an AuthorizationContext.

Covers:
- Direct grants and the ownership override
- own_ bucket only consulted for owners
- Exact role matching
- Organization hint precedence
"""

import uuid

from invoicing.core.authorization import (
    AuthorizationContext,
    OrganizationHints,
    authorize,
    require_role,
)
from invoicing.core.permissions import Action, Resource, SystemRole, get_default_permissions


def make_context(role_name, is_owner=False, permissions=None):
    return AuthorizationContext(
        user_id=uuid.uuid4(),
        organization_id=uuid.uuid4(),
        role_name=role_name,
        permissions=get_default_permissions(role_name) if permissions is None else permissions,
        is_owner=is_owner,
    )


class TestAuthorize:

    def test_direct_grant(self):
        context = make_context(SystemRole.ORG_USER)
        assert authorize(context, Resource.INVOICES, Action.UPDATE)
        assert authorize(context, "invoices", "read")

    def test_own_bucket_ignored_when_not_owner(self):
        context = make_context(SystemRole.ORG_USER, is_owner=False)
        assert not authorize(context, Resource.INVOICES, Action.DELETE)

    def test_org_user_may_delete_own_invoice(self):
        context = make_context(SystemRole.ORG_USER, is_owner=True)
        assert authorize(context, Resource.INVOICES, Action.DELETE)
        assert authorize(context, Resource.CLIENTS, Action.DELETE)

    def test_org_viewer_may_not_delete_own_invoice(self):
        context = make_context(SystemRole.ORG_VIEWER, is_owner=True)
        assert not authorize(context, Resource.INVOICES, Action.DELETE)
        assert authorize(context, Resource.INVOICES, Action.READ)

    def test_ownership_only_widens_to_own_bucket(self):
        context = make_context(SystemRole.ORG_USER, is_owner=True)
        # own_invoices grants delete only
        assert not authorize(context, Resource.USERS, Action.DELETE)
        assert not authorize(context, Resource.SUBSCRIPTION, Action.UPDATE)

    def test_no_role_denies_everything(self):
        context = AuthorizationContext(
            user_id=uuid.uuid4(),
            organization_id=uuid.uuid4(),
            permissions=get_default_permissions(SystemRole.ORG_ADMIN),
        )
        assert not authorize(context, Resource.INVOICES, Action.READ)

    def test_unknown_resource_denied(self):
        context = make_context(SystemRole.ORG_ADMIN, is_owner=True)
        assert not authorize(context, "payments", Action.READ)

    def test_with_ownership_returns_new_context(self):
        context = make_context(SystemRole.ORG_USER)
        owned = context.with_ownership(True)
        assert owned.is_owner and not context.is_owner
        assert owned.can(Resource.INVOICES, Action.DELETE)
        assert not context.can(Resource.INVOICES, Action.DELETE)


class TestRequireRole:

    def test_exact_match_only(self):
        context = make_context(SystemRole.ORG_ADMIN)
        assert require_role(context, SystemRole.ORG_ADMIN)
        assert require_role(context, SystemRole.ORG_USER, SystemRole.ORG_ADMIN)
        # no hierarchy: an org admin is not a platform admin
        assert not require_role(context, SystemRole.PLATFORM_ADMIN)

    def test_missing_role(self):
        context = make_context(None, permissions={})
        assert not require_role(context, SystemRole.ORG_ADMIN)


class TestOrganizationHints:

    def test_header_beats_query_and_path(self):
        hints = OrganizationHints(header="h", query="q", path="p")
        assert hints.explicit_organization_id() == "h"

    def test_query_beats_path(self):
        assert OrganizationHints(query="q", path="p").explicit_organization_id() == "q"

    def test_empty_values_are_skipped(self):
        assert OrganizationHints(header="", query=None, path="p").explicit_organization_id() == "p"

    def test_no_hints(self):
        assert OrganizationHints().explicit_organization_id() is None
