"""Default form structure and customizations, in the persisted wire format.

Loaded configurations are merged over these values by
bookingform.config.load_config; nothing else reads them directly.
"""

from typing import Any, Dict, List

DEFAULT_FORM_FIELDS: Dict[str, List[Dict[str, Any]]] = {
    "common": [
        {"id": "field_common_1", "key": "full_name", "type": "short-text", "label": "Full Name",
         "placeholder": "Enter your full name", "required": True},
        {"id": "field_common_2", "key": "email", "type": "short-text", "label": "Email Address",
         "placeholder": "Enter your email address", "required": True},
        {"id": "field_common_3", "key": "phone_number", "type": "short-text", "label": "Phone Number",
         "placeholder": "Enter your phone number", "required": True},
        {"id": "field_common_4", "key": "special_instructions", "type": "long-text",
         "label": "Special Instructions", "placeholder": "Any special requests?", "required": False},
    ],
    "distance": [
        {"id": "field_distance_1", "key": "pickup_location", "type": "short-text", "label": "Pickup Location",
         "placeholder": "Enter pickup address", "required": True},
        {"id": "field_distance_2", "key": "dropoff_location", "type": "short-text", "label": "Dropoff Location",
         "placeholder": "Enter destination address", "required": True},
        {"id": "field_distance_3", "key": "datetime", "type": "date-time", "label": "Pickup Date & Time",
         "required": True},
    ],
    "hourly": [
        {"id": "field_hourly_1", "key": "pickup_location", "type": "short-text", "label": "Pickup Location",
         "placeholder": "Enter pickup address", "required": True},
        {"id": "field_hourly_2", "key": "rental_hours", "type": "number", "label": "Rental Hours",
         "placeholder": "e.g., 3", "required": True},
        {"id": "field_hourly_3", "key": "datetime", "type": "date-time", "label": "Pickup Date & Time",
         "required": True},
    ],
    "flat_rate": [
        {"id": "field_flat_rate_1", "key": "route_id", "type": "dropdown", "label": "Select a Route",
         "required": True, "options": []},
        {"id": "field_flat_rate_2", "key": "datetime", "type": "date-time", "label": "Pickup Date & Time",
         "required": True},
    ],
    "on_demand": [
        {"id": "field_on_demand_1", "key": "pickup_location", "type": "short-text", "label": "Pickup Location",
         "placeholder": "Enter pickup address", "required": True},
        {"id": "field_on_demand_2", "key": "dropoff_location", "type": "short-text", "label": "Dropoff Location",
         "placeholder": "Enter destination address", "required": True},
    ],
    "charter": [
        {"id": "field_charter_1", "key": "pickup_location", "type": "short-text", "label": "Pickup Location",
         "placeholder": "Enter pickup address", "required": True},
        {"id": "field_charter_2", "key": "event_details", "type": "long-text", "label": "Event Details",
         "placeholder": "Describe the charter needs", "required": True},
        {"id": "field_charter_3", "key": "datetime", "type": "date-time", "label": "Pickup Date & Time",
         "required": True},
    ],
    "airport_transfer": [
        {"id": "field_airport_1", "key": "transfer_direction", "type": "radio", "label": "Transfer Direction",
         "required": True, "options": ["From Airport", "To Airport"]},
        {"id": "field_airport_2", "key": "airport_name", "type": "short-text", "label": "Airport Name",
         "placeholder": "e.g., JFK, LAX", "required": True},
        {"id": "field_airport_3", "key": "pickup_location", "type": "short-text", "label": "Pickup Address",
         "placeholder": "Enter pickup address", "required": True,
         "conditionalLogic": {"fieldKey": "transfer_direction", "value": "To Airport"}},
        {"id": "field_airport_4", "key": "dropoff_location", "type": "short-text", "label": "Dropoff Address",
         "placeholder": "Enter destination address", "required": True,
         "conditionalLogic": {"fieldKey": "transfer_direction", "value": "From Airport"}},
        {"id": "field_airport_5", "key": "flight_number", "type": "short-text", "label": "Flight Number",
         "placeholder": "Optional", "required": False},
        {"id": "field_airport_6", "key": "datetime", "type": "date-time", "label": "Pickup/Arrival Date & Time",
         "required": True},
    ],
    "event_shuttle": [
        {"id": "field_event_1", "key": "event_name", "type": "short-text", "label": "Event Name",
         "placeholder": "e.g., Music Festival", "required": True},
        {"id": "field_event_2", "key": "pickup_location", "type": "short-text", "label": "Pickup Location",
         "placeholder": "Enter pickup address", "required": True},
        {"id": "field_event_3", "key": "datetime", "type": "date-time", "label": "Pickup Date & Time",
         "required": True},
    ],
}

DEFAULT_PRICING: Dict[str, float] = {
    "base_fare": 2.5,
    "cost_per_km": 1.5,
    "cost_per_min": 0.25,
    "cost_per_hour": 50.0,
}

DEFAULT_CUSTOMIZATIONS: Dict[str, Any] = {
    "title": "Book Your Ride",
    "logo": None,
    "defaultLanguage": "en",
    "selectedLanguages": ["en", "es", "fr"],
    "paymentIcons": ["visa", "mastercard", "paypal", "cash"],
    "color": "#f43f5e",
    "enabledBookingTypes": ["distance", "hourly", "flat_rate", "on_demand"],
    "hourlyNotes": {
        "minimum_hours": "2 hours",
        "extra_hour_charges": "$50/hr",
        "driver_waiting_charges": "$1/min after 15 mins grace period",
        "toll_parking": "Not included",
    },
    "extraOptions": [
        {"name": "Child Seat", "price": 15.0, "enabled": True, "min": 0, "max": 2},
        {"name": "Bottled Water", "price": 2.0, "enabled": True, "min": 0, "max": 5},
    ],
    "layout_settings": {
        "container_style": "card_with_shadow",
        "container_color": "rgba(255,255,255,1)",
        "container_color_dark": "rgba(30,41,59,1)",
        "container_border_radius": 8,
        "button_style": "filled_rounded",
        "button_position": "right",
        "progress_bar_visibility": "visible",
        "step_titles_visibility": "visible",
        "secondary_button_style": "filled",
        "components_visibility": {
            "booking_type_selector": True,
            "language_selector": True,
            "vehicle_selector": True,
            "round_trip_button": True,
            "add_waypoint_button": True,
            "extra_options_button": True,
            "notes_button": True,
            "payment_icons": True,
            "map_visibility": True,
            "show_logo": True,
        },
        "waypoint_button_config": {
            "enabled_for_types": ["distance"],
            "display_after_field": "dropoff_location",
        },
    },
    "pricing": DEFAULT_PRICING,
    "routes": [],
    "vehicles": [],
}

# Extra-option bounds applied when a stored option omits them
DEFAULT_EXTRA_MIN = 0
DEFAULT_EXTRA_MAX = 5


__all__ = [
    "DEFAULT_FORM_FIELDS",
    "DEFAULT_PRICING",
    "DEFAULT_CUSTOMIZATIONS",
    "DEFAULT_EXTRA_MIN",
    "DEFAULT_EXTRA_MAX",
]
