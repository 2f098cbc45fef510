# hangar/services/notifications.py
"""
Customer-facing confirmation message and WhatsApp deep link.

Only builds the text and the link; delivery is a manual staff action.
"""

from datetime import date
from urllib.parse import quote

from ..config import settings
from ..utils.identity_utils import normalize_phone


def _format_date(date_str: str) -> str:
    """'2026-01-28' → '28/01/2026'."""
    try:
        return date.fromisoformat(date_str).strftime("%d/%m/%Y")
    except ValueError:
        return date_str


def build_confirmation_message(
    business_name: str,
    customer_name: str,
    appointment_date: str,
    appointment_time: str,
    vehicle_model: str | None,
    vehicle_plate: str | None,
    service_name: str | None,
) -> str:
    plate = f" ({vehicle_plate})" if vehicle_plate else ""
    return (
        f"Olá, {customer_name} 👋\n"
        "\n"
        "Seu agendamento foi confirmado com sucesso.\n"
        "Estamos aguardando a chegada do seu veículo na estética para iniciarmos "
        "o serviço no horário marcado.\n"
        "\n"
        "Recomendamos chegar com 15 minutos de antecedência, para conferência "
        "rápida e melhor organização do atendimento.\n"
        "\n"
        f"📅 Data: {_format_date(appointment_date)}\n"
        f"⏰ Horário: {appointment_time}\n"
        f"🚗 Veículo: {vehicle_model or 'Veículo'}{plate}\n"
        f"🛠 Serviço: {service_name or 'Serviço Geral'}\n"
        "\n"
        "Qualquer imprevisto, por favor nos avise com antecedência.\n"
        "\n"
        "Até breve!\n"
        f"— {business_name}"
    )


def whatsapp_link(phone: str, message: str) -> str:
    """https://wa.me/<digits>?text=<message>, country code added for local numbers."""
    digits = normalize_phone(phone)
    if len(digits) <= 11:
        digits = f"{settings.whatsapp_country_code}{digits}"
    return f"https://wa.me/{digits}?text={quote(message)}"


def confirmation_offer(business, appointment) -> dict | None:
    """{phone, message, link} for a confirmed appointment, None without a customer phone."""
    customer = appointment.customer
    if customer is None or not customer.phone:
        return None

    vehicle = appointment.vehicle
    message = build_confirmation_message(
        business_name=business.business_name,
        customer_name=customer.name,
        appointment_date=appointment.date,
        appointment_time=appointment.time,
        vehicle_model=vehicle.model if vehicle else None,
        vehicle_plate=vehicle.plate if vehicle else None,
        service_name=appointment.service_type,
    )
    return {
        "phone": customer.phone,
        "message": message,
        "link": whatsapp_link(customer.phone, message),
    }
