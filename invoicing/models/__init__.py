# Models package - database tables
from invoicing.models.user import User, Organization, UserOrganizationRole
from invoicing.models.role import Role
from invoicing.models.subscription import Subscription
from invoicing.models.client import Client
from invoicing.models.invoice import Invoice, InvoiceItem, InvoiceStatus
