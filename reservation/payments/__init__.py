from reservation.payments.channel import MessageChannel, PaymentResult, parse_payment_result
from reservation.payments.gateway import GatewayForm, build_form_fields, build_gateway_form, format_phone_number
from reservation.payments.handshake import PaymentHandshake
from reservation.payments.popup import PopupNamer, centered_geometry
from reservation.payments.reconcile import ReconcileOutcome, reconcile_payment_status
from reservation.payments.session import PaymentInit, PaymentSession, PaymentStatus

__all__ = [
    "GatewayForm",
    "MessageChannel",
    "PaymentHandshake",
    "PaymentInit",
    "PaymentResult",
    "PaymentSession",
    "PaymentStatus",
    "PopupNamer",
    "ReconcileOutcome",
    "build_form_fields",
    "build_gateway_form",
    "centered_geometry",
    "format_phone_number",
    "parse_payment_result",
    "reconcile_payment_status",
]
