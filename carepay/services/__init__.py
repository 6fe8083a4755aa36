"""Services package."""

from carepay.services.signature_service import SignatureVerifier
from carepay.services.razorpay_gateway import RazorpayGateway
from carepay.services.fulfillment_service import FulfillmentService
from carepay.services.payment_service import PaymentService

__all__ = [
    "SignatureVerifier",
    "RazorpayGateway",
    "FulfillmentService",
    "PaymentService",
]
