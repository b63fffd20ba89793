"""Translation lookup with English fallback.

Keys are normalized before lookup (lowercased, whitespace and slashes become
underscores). A missing translation falls back to English, then to the
caller's default text, then to a title-cased rendering of the key.
"""

import re
from typing import Dict, List, Optional

LANGUAGES: List[Dict[str, str]] = [
    {"code": "en", "name": "English"},
    {"code": "es", "name": "Español"},
    {"code": "fr", "name": "Français"},
    {"code": "de", "name": "Deutsch"},
    {"code": "it", "name": "Italiano"},
    {"code": "pt", "name": "Português"},
]

LANGUAGE_FLAG_SVGS: Dict[str, str] = {
    "en": '<path fill="#012169" d="M0 0h21v15H0z"/><path fill="none" stroke="#fff" stroke-width="3" '
          'd="m0 0 21 15m0-15L0 15"/><path fill="none" stroke="#C8102E" stroke-width="1" '
          'd="m0 0 21 15m0-15L0 15"/><path fill="none" stroke="#fff" stroke-width="5" d="M0 7.5h21M10.5 0v15"/>'
          '<path fill="none" stroke="#C8102E" stroke-width="3" d="M0 7.5h21M10.5 0v15"/>',
    "es": '<path fill="#C60B1E" d="M0 0h21v15H0z"/><path fill="#FFC400" d="M0 3.75h21v7.5H0z"/>',
    "fr": '<path fill="#fff" d="M0 0h21v15H0z"/><path fill="#002654" d="M0 0h7v15H0z"/>'
          '<path fill="#CE1126" d="M14 0h7v15h-7z"/>',
    "de": '<path d="M0 0h21v15H0z"/><path fill="#FFCE00" d="M0 5h21v5H0z"/><path fill="#D00" d="M0 10h21v5H0z"/>',
    "it": '<path fill="#fff" d="M0 0h21v15H0z"/><path fill="#009246" d="M0 0h7v15H0z"/>'
          '<path fill="#CE2B37" d="M14 0h7v15h-7z"/>',
    "pt": '<path fill="#D21034" d="M0 0h21v15H0z"/><path fill="#006233" d="M0 0h8v15H0z"/>'
          '<circle cx="8" cy="7.5" r="3" fill="#FFC400"/>',
}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "trip_details": {"en": "Trip Details", "es": "Detalles del viaje", "fr": "Détails du trajet",
                     "de": "Fahrtdetails"},
    "vehicle": {"en": "Vehicle", "es": "Vehículo", "fr": "Véhicule", "de": "Fahrzeug"},
    "passenger": {"en": "Passenger", "es": "Pasajero", "fr": "Passager", "de": "Fahrgast"},
    "summary": {"en": "Summary", "es": "Resumen", "fr": "Résumé", "de": "Zusammenfassung"},
    "select_vehicle": {"en": "Select a Vehicle", "es": "Seleccione un vehículo",
                       "fr": "Choisissez un véhicule"},
    "passenger_details": {"en": "Passenger Details", "es": "Datos del pasajero",
                          "fr": "Informations passager"},
    "payment_method": {"en": "Payment Method", "es": "Método de pago", "fr": "Moyen de paiement"},
    "booking_summary": {"en": "Booking Summary", "es": "Resumen de la reserva",
                        "fr": "Récapitulatif de la réservation"},
    "next_button": {"en": "Next", "es": "Siguiente", "fr": "Suivant", "de": "Weiter"},
    "back_button": {"en": "Back", "es": "Atrás", "fr": "Retour", "de": "Zurück"},
    "book_now": {"en": "Book Now", "es": "Reservar ahora", "fr": "Réserver", "de": "Jetzt buchen"},
    "proceed_to_payment": {"en": "Proceed to Payment", "es": "Continuar al pago",
                           "fr": "Procéder au paiement"},
    "submitting": {"en": "Submitting...", "es": "Enviando...", "fr": "Envoi..."},
    "try_again": {"en": "Try Again", "es": "Intentar de nuevo", "fr": "Réessayer"},
    "edit": {"en": "Edit", "es": "Editar", "fr": "Modifier"},
    "optional": {"en": "Optional", "es": "Opcional", "fr": "Facultatif", "de": "Optional"},
    "select_an_option": {"en": "Select an option", "es": "Seleccione una opción",
                         "fr": "Sélectionnez une option"},
    "select_a_route": {"en": "Select a Route", "es": "Seleccione una ruta", "fr": "Choisissez un trajet"},
    "add_waypoint": {"en": "Add Waypoint", "es": "Añadir parada", "fr": "Ajouter une étape"},
    "remove_waypoint": {"en": "Remove", "es": "Eliminar", "fr": "Supprimer"},
    "waypoint": {"en": "Waypoint", "es": "Parada", "fr": "Étape"},
    "return_trip": {"en": "Return Trip", "es": "Viaje de regreso", "fr": "Trajet retour"},
    "round_trip": {"en": "Round Trip", "es": "Ida y vuelta", "fr": "Aller-retour"},
    "return_dropoff": {"en": "Return Dropoff", "es": "Destino de regreso", "fr": "Destination retour"},
    "extra_options": {"en": "Extra Options", "es": "Opciones adicionales", "fr": "Options supplémentaires"},
    "notes": {"en": "Notes", "es": "Notas", "fr": "Remarques"},
    "minimum_hours": {"en": "Minimum Hours", "es": "Horas mínimas", "fr": "Heures minimum"},
    "extra_hour_charges": {"en": "Extra Hour Charges", "es": "Cargo por hora extra",
                           "fr": "Frais d'heure supplémentaire"},
    "driver_waiting_charges": {"en": "Driver Waiting Charges", "es": "Cargo por espera",
                               "fr": "Frais d'attente"},
    "toll_parking": {"en": "Toll & Parking", "es": "Peajes y estacionamiento", "fr": "Péages et parking"},
    "estimated_fare": {"en": "Estimated Fare", "es": "Tarifa estimada", "fr": "Tarif estimé"},
    "total_fare": {"en": "Total Fare", "es": "Tarifa total", "fr": "Tarif total"},
    "credit_card": {"en": "Credit Card", "es": "Tarjeta de crédito", "fr": "Carte bancaire"},
    "paypal": {"en": "PayPal"},
    "cash": {"en": "Cash", "es": "Efectivo", "fr": "Espèces", "de": "Bargeld"},
    "we_accept": {"en": "We accept", "es": "Aceptamos", "fr": "Nous acceptons"},
    "promo_code": {"en": "Promo Code", "es": "Código promocional", "fr": "Code promo"},
    "passengers": {"en": "Passengers", "es": "Pasajeros", "fr": "Passagers"},
    "luggage": {"en": "Luggage", "es": "Equipaje", "fr": "Bagages"},
    "carry_on": {"en": "Carry-on", "es": "Equipaje de mano", "fr": "Bagage cabine"},
    "select_date": {"en": "Select date", "es": "Seleccione fecha", "fr": "Choisir la date"},
    "select_time": {"en": "Select time", "es": "Seleccione hora", "fr": "Choisir l'heure"},
    "clear": {"en": "Clear", "es": "Borrar", "fr": "Effacer"},
    "fill_required_fields": {"en": "Please fill out all required fields.",
                             "es": "Por favor complete todos los campos obligatorios.",
                             "fr": "Veuillez remplir tous les champs obligatoires."},
    "select_vehicle_to_continue": {"en": "Please select a vehicle to continue.",
                                   "es": "Seleccione un vehículo para continuar.",
                                   "fr": "Veuillez choisir un véhicule pour continuer."},
    "booking_confirmed": {"en": "Booking Confirmed!", "es": "¡Reserva confirmada!",
                          "fr": "Réservation confirmée !"},
    "booking_confirmed_message": {
        "en": "Thank you! Your booking has been received. A confirmation has been sent to your email.",
        "es": "¡Gracias! Hemos recibido su reserva. Le enviamos una confirmación por correo.",
        "fr": "Merci ! Votre réservation a bien été reçue. Une confirmation vous a été envoyée.",
    },
    "preview_notice": {"en": "This is a preview. No booking was created.",
                       "es": "Esto es una vista previa. No se creó ninguna reserva.",
                       "fr": "Ceci est un aperçu. Aucune réservation n'a été créée."},
    "distance": {"en": "Distance", "es": "Distancia", "fr": "Distance"},
    "hourly": {"en": "Hourly", "es": "Por horas", "fr": "À l'heure"},
    "flat_rate": {"en": "Flat Rate", "es": "Tarifa fija", "fr": "Forfait"},
    "on_demand": {"en": "On Demand", "es": "Bajo demanda", "fr": "À la demande"},
    "charter": {"en": "Charter", "es": "Chárter", "fr": "Affrètement"},
    "airport_transfer": {"en": "Airport Transfer", "es": "Traslado al aeropuerto",
                         "fr": "Transfert aéroport"},
    "event_shuttle": {"en": "Event Shuttle", "es": "Lanzadera de eventos", "fr": "Navette événement"},
    "pickup_location": {"en": "Pickup Location", "es": "Lugar de recogida", "fr": "Lieu de prise en charge"},
    "dropoff_location": {"en": "Dropoff Location", "es": "Lugar de destino", "fr": "Lieu de dépose"},
    "placeholder_pickup_location": {"en": "Enter pickup address", "es": "Dirección de recogida",
                                    "fr": "Adresse de prise en charge"},
    "placeholder_dropoff_location": {"en": "Enter destination address", "es": "Dirección de destino",
                                     "fr": "Adresse de destination"},
    "full_name": {"en": "Full Name", "es": "Nombre completo", "fr": "Nom complet"},
    "email": {"en": "Email Address", "es": "Correo electrónico", "fr": "Adresse e-mail"},
    "phone_number": {"en": "Phone Number", "es": "Número de teléfono", "fr": "Numéro de téléphone"},
    "confirm_booking": {"en": "Confirm Booking", "es": "Confirmar reserva", "fr": "Confirmer la réservation",
                        "de": "Buchung bestätigen"},
    "make_payment": {"en": "Make Payment", "es": "Realizar pago", "fr": "Effectuer le paiement"},
    "redirecting_to_payment": {"en": "Redirecting to Payment...", "es": "Redirigiendo al pago...",
                               "fr": "Redirection vers le paiement..."},
    "redirecting_to_paypal": {"en": "Redirecting to PayPal...", "es": "Redirigiendo a PayPal...",
                              "fr": "Redirection vers PayPal..."},
    "enter_stop_location": {"en": "Enter a stop location", "es": "Ingrese una parada",
                            "fr": "Saisissez une étape"},
    "enter_final_destination": {"en": "Enter final destination", "es": "Ingrese el destino final",
                                "fr": "Saisissez la destination finale"},
    "fare_is_estimate": {"en": "This fare is an estimate.", "es": "Esta tarifa es una estimación.",
                         "fr": "Ce tarif est une estimation."},
    "advanced_options": {"en": "More Options", "es": "Más opciones", "fr": "Plus d'options"},
    "waypoints": {"en": "Waypoints", "es": "Paradas", "fr": "Étapes"},
    "return_pickup": {"en": "Return Pickup", "es": "Recogida de regreso", "fr": "Prise en charge retour"},
    "return_waypoints": {"en": "Return Waypoints", "es": "Paradas de regreso", "fr": "Étapes retour"},
    "your_vehicle": {"en": "Your Vehicle", "es": "Su vehículo", "fr": "Votre véhicule"},
    "passenger_contact_info": {"en": "Passenger Info", "es": "Datos del pasajero", "fr": "Infos passager"},
    "apply": {"en": "Apply", "es": "Aplicar", "fr": "Appliquer"},
    "enter_promo_code": {"en": "Enter promo code", "es": "Ingrese el código", "fr": "Saisissez le code"},
    "accepted_payments": {"en": "Accepted Payments", "es": "Pagos aceptados", "fr": "Paiements acceptés"},
    "rate_per_km_label": {"en": "/km", "es": "/km", "fr": "/km"},
    "hourly_booking_notes_title": {"en": "Hourly Booking Notes", "es": "Notas de reserva por horas",
                                   "fr": "Notes de réservation à l'heure"},
    "ride_details": {"en": "Ride Details", "es": "Detalles del viaje", "fr": "Détails de la course"},
    "choose_vehicle": {"en": "Choose Vehicle", "es": "Elegir vehículo", "fr": "Choisir le véhicule"},
    "booking_type": {"en": "Booking Type", "es": "Tipo de reserva", "fr": "Type de réservation"},
    "yes": {"en": "Yes", "es": "Sí", "fr": "Oui", "de": "Ja"},
    "no": {"en": "No", "es": "No", "fr": "Non", "de": "Nein"},
    "form_unavailable": {"en": "Booking form unavailable", "es": "Formulario de reserva no disponible",
                         "fr": "Formulaire de réservation indisponible"},
}

_KEY_SEPARATORS = re.compile(r"[\s/]")


def translation_key(key: str) -> str:
    """Normalize a lookup key.

    Examples:
        >>> translation_key("Pickup/Arrival Date")
        'pickup_arrival_date'
    """
    return _KEY_SEPARATORS.sub("_", key.lower())


def format_label(key: str) -> str:
    """Title-case a snake_case key.

    Examples:
        >>> format_label("rental_hours")
        'Rental Hours'
    """
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), key.replace("_", " "))


def translate(key: str, lang: str, default: Optional[str] = None) -> str:
    """Translate ``key`` into ``lang`` with English fallback.

    Examples:
        >>> translate("next_button", "es")
        'Siguiente'
        >>> translate("next_button", "it")
        'Next'
        >>> translate("unknown_key", "fr", "Fallback")
        'Fallback'
        >>> translate("flight_number", "fr")
        'Flight Number'
    """
    if not key:
        return default or ""
    entry = TRANSLATIONS.get(translation_key(key))
    if entry:
        if entry.get(lang):
            return entry[lang]
        if entry.get("en"):
            return entry["en"]
    return default or format_label(key)


def lookup(key: str, lang: str) -> Optional[str]:
    """Translation of ``key`` or None when the table has no entry.

    Examples:
        >>> lookup("placeholder_pickup_location", "es")
        'Dirección de recogida'
        >>> lookup("placeholder_flight_number", "en") is None
        True
    """
    entry = TRANSLATIONS.get(translation_key(key)) if key else None
    if not entry:
        return None
    return entry.get(lang) or entry.get("en")


def localized_label(key: str, lang: str, label: str) -> str:
    """Translate a configured label.

    The configured label is the English text; only an explicit entry for a
    non-English ``lang`` replaces it.

    Examples:
        >>> localized_label("pickup_location", "en", "Pickup Address")
        'Pickup Address'
        >>> localized_label("pickup_location", "es", "Pickup Address")
        'Lugar de recogida'
    """
    if key and lang != "en":
        entry = TRANSLATIONS.get(translation_key(key))
        if entry and entry.get(lang):
            return entry[lang]
    return label or format_label(key or "")


class Translator:
    """Translation lookup bound to one language."""

    def __init__(self, lang: str):
        self.lang = lang

    def __call__(self, key: str, default: Optional[str] = None) -> str:
        return translate(key, self.lang, default)

    def label(self, key: str, label: str) -> str:
        return localized_label(key, self.lang, label)


def language_name(code: str) -> str:
    for language in LANGUAGES:
        if language["code"] == code:
            return language["name"]
    return code


__all__ = [
    "LANGUAGES",
    "LANGUAGE_FLAG_SVGS",
    "TRANSLATIONS",
    "translation_key",
    "format_label",
    "translate",
    "lookup",
    "localized_label",
    "Translator",
    "language_name",
]
