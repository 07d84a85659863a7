"""
TicketDesk: support ticket lifecycle and messaging.

Server side: a FastAPI service over SQLModel (``ticketdesk.app``).
Client side: the ticket session controller and its sync scheduler
(``ticketdesk.client``).
"""

__version__ = "1.0.0"
