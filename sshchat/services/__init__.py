from sshchat.services.delivery_service import DeliveryService
from sshchat.services.help_service import HelpService
from sshchat.services.messaging_service import MessagingService

__all__ = [
    "DeliveryService",
    "HelpService",
    "MessagingService",
]
