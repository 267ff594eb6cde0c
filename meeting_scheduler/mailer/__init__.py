"""
Email relay: Gmail SMTP transport, invitation dispatch and diagnostics
"""
from .relay_client import RelayClient
from .service import InvitationService, dispatch_report
from .transport import GmailTransport, create_transport

__all__ = ['GmailTransport', 'create_transport', 'InvitationService', 'dispatch_report', 'RelayClient']
