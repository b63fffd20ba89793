"""Inline SVG path markup used by the renderers."""

from typing import Dict

ADD_WAYPOINT = (
    '<path d="M21 10c0 7-9 13-9 13s-9-6-9-13a9 9 0 0 1 18 0Z"/>'
    '<path d="M15 10h-6M12 7v6" stroke-linecap="round"/>'
)
REMOVE = '<path stroke-linecap="round" stroke-linejoin="round" d="M6 18 18 6M6 6l12 12"/>'
CALENDAR = (
    '<path stroke-linecap="round" stroke-linejoin="round" '
    'd="M8 7V3m8 4V3m-9 8h10M5 21h14a2 2 0 0 0 2-2V7a2 2 0 0 0-2-2H5a2 2 0 0 0-2 2v12a2 2 0 0 0 2 2z"/>'
)
CLOCK = '<path stroke-linecap="round" stroke-linejoin="round" d="M12 8v4l3 3m6-3a9 9 0 1 1-18 0 9 9 0 0 1 18 0z"/>'
CHECK = '<path stroke-linecap="round" stroke-linejoin="round" d="M5 13l4 4L19 7"/>'
CHEVRON_DOWN = '<path stroke-linecap="round" stroke-linejoin="round" d="M19 9l-7 7-7-7"/>'
ROUND_TRIP = '<path stroke-linecap="round" stroke-linejoin="round" d="M17 13l-5 5-5-5m10-6l-5-5-5 5"/>'
EXTRAS = '<path stroke-linecap="round" stroke-linejoin="round" d="M12 5v14m7-7H5"/>'
NOTES = (
    '<path stroke-linecap="round" stroke-linejoin="round" d="M9 12h6m-6 4h6m2 5H7a2 2 0 0 1-2-2V5a2 2 0 0 1 '
    '2-2h5.586a1 1 0 0 1 .707.293l5.414 5.414a1 1 0 0 1 .293.707V19a2 2 0 0 1-2 2z"/>'
)
PASSENGERS = (
    '<path stroke-linecap="round" stroke-linejoin="round" d="M15.75 6a3.75 3.75 0 1 1-7.5 0 3.75 3.75 0 0 1 '
    '7.5 0ZM4.5 20.1a7.5 7.5 0 0 1 15 0"/>'
)
LUGGAGE = (
    '<path stroke-linecap="round" stroke-linejoin="round" d="M20.25 7.5l-.6 10.6a2.25 2.25 0 0 1-2.25 2.1H6.6'
    'a2.25 2.25 0 0 1-2.25-2.1L3.75 7.5M3.4 7.5h17.2"/>'
)
CARRY_ON = (
    '<path stroke-linecap="round" stroke-linejoin="round" d="M15.75 10.5V6a3.75 3.75 0 1 0-7.5 0v4.5M5.5 7.5'
    'h13l1.25 14.25H4.25z"/>'
)
CREDIT_CARD = '<rect width="20" height="14" x="2" y="5" rx="2"/><line x1="2" x2="22" y1="10" y2="10"/>'

BOOKING_TYPE_ICONS: Dict[str, str] = {
    "distance": '<path stroke-linecap="round" stroke-linejoin="round" d="M9 6.75V15m6-6v8.25m.5 3.5 4.9-2.4'
                'a1 1 0 0 0 .6-.9V4.8a1 1 0 0 0-1.4-.9L15.5 6a1 1 0 0 1-1 0L9.5 3.5a1 1 0 0 0-1 0L3.6 5.9'
                'a1 1 0 0 0-.6.9v12.6a1 1 0 0 0 1.4.9L8.5 18a1 1 0 0 1 1 0l5 2.5a1 1 0 0 0 1 0z"/>',
    "hourly": CLOCK,
    "flat_rate": '<path d="M12.6 2.6A2 2 0 0 0 11.2 2H4a2 2 0 0 0-2 2v7.2a2 2 0 0 0 .6 1.4l8.7 8.7a2.4 2.4 0 0 0 '
                 '3.4 0l6.6-6.6a2.4 2.4 0 0 0 0-3.4z"/><circle cx="8" cy="8" r="1" fill="currentColor"/>',
    "on_demand": '<path stroke-linecap="round" stroke-linejoin="round" d="M13 10V3L4 14h7v7l9-11h-7z"/>',
    "charter": '<path stroke-linecap="round" stroke-linejoin="round" d="M5 11l1.5-4.5h11L19 11M3 12v8h2v-1h14v1'
               'h2v-8l-2-1H5z"/>',
    "airport_transfer": '<path stroke-linecap="round" stroke-linejoin="round" d="M12 19V5m0 14-4-4m4 4 4-4M8 5h8'
                        'M5 10h14"/>',
    "event_shuttle": CALENDAR + '<path stroke-linecap="round" stroke-linejoin="round" d="M12 11v6m3-3h-6"/>',
}

# Accepted-payment icons, keyed by the names stored in paymentIcons
PAYMENT_ICONS: Dict[str, Dict[str, str]] = {
    "visa": {"label": "Visa",
             "icon": '<rect x="1" y="4" width="22" height="16" rx="2" fill="#142688"/>'
                     '<text x="12" y="15" fill="#fff" font-size="7" font-weight="bold" text-anchor="middle">VISA</text>'},
    "mastercard": {"label": "Mastercard",
                   "icon": '<circle cx="9" cy="12" r="6" fill="#EA001B"/><circle cx="15" cy="12" r="6" '
                           'fill="#F79F1A" fill-opacity=".85"/>'},
    "amex": {"label": "American Express",
             "icon": '<rect x="1" y="4" width="22" height="16" rx="2" fill="#0077C8"/>'
                     '<text x="12" y="15" fill="#fff" font-size="6" font-weight="bold" text-anchor="middle">AMEX</text>'},
    "paypal": {"label": "PayPal",
               "icon": '<path d="M7 20l2.5-16h6a4 4 0 0 1 0 8h-4L10 20z" fill="#253B80"/>'
                       '<path d="M9 20l2-12h5a3 3 0 0 1 0 6h-3l-1 6z" fill="#179BD7"/>'},
    "stripe": {"label": "Stripe",
               "icon": '<rect x="1" y="4" width="22" height="16" rx="2" fill="#6772E5"/>'
                       '<text x="12" y="15" fill="#fff" font-size="6" text-anchor="middle">stripe</text>'},
    "applepay": {"label": "Apple Pay",
                 "icon": '<rect x="1" y="4" width="22" height="16" rx="2" fill="#000"/>'
                         '<text x="12" y="15" fill="#fff" font-size="6" text-anchor="middle">Pay</text>'},
    "googlepay": {"label": "Google Pay",
                  "icon": '<rect x="1" y="4" width="22" height="16" rx="2" fill="#fff" stroke="#ddd"/>'
                          '<text x="12" y="15" fill="#5F6368" font-size="6" text-anchor="middle">G Pay</text>'},
    "cash": {"label": "Cash",
             "icon": '<path fill="none" stroke="currentColor" stroke-width="1.5" d="M3 10h18M7 15h1m4 0h1m-7 4h12'
                     'a3 3 0 0 0 3-3V8a3 3 0 0 0-3-3H6a3 3 0 0 0-3 3v8a3 3 0 0 0 3 3z"/>'},
}
