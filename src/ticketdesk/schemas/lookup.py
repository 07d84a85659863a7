"""
Read-only customer and site schemas.
"""
from ticketdesk.core.schema_base import HTTPSchemaModel


class CustomerRead(HTTPSchemaModel):
    id: int
    customer_name: str


class SiteRead(HTTPSchemaModel):
    id: int
    site_name: str
    customer_id: int
