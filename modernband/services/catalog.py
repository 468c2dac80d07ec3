from modernband.schemas.booking import PackageType, TimeSlot
from modernband.services.booking_form import GHODA_BAGGI_CHOICES, MAX_DHOLS

PACKAGES = [
    {
        "key": "baraat",
        "packageType": PackageType.BARAAT.value,
        "title": "Baraat Band",
        "startingPrice": 30000,
        "features": [
            "Professional brass band with uniformed musicians",
            "8+ Modern Pillar lights",
            "Decorated Royal Baggi or Ghodi",
            "Fireworks, Flower Canon, and more",
            "Mix of Bollywood, Punjabi, and classical music",
        ],
    },
    {
        "key": "djBand",
        "packageType": PackageType.DJ.value,
        "title": "DJ Band",
        "startingPrice": 20000,
        "features": [
            "DJ on a mobile stage",
            "Professional sound system included",
            "Custom song requests welcomed",
        ],
    },
    {
        "key": "dhol",
        "packageType": PackageType.DHOL.value,
        "title": "Dhol Only",
        "startingPrice": None,
        "features": [
            f"Up to {MAX_DHOLS} dhol players",
            "Traditional Punjabi beats for entry and baraat",
        ],
    },
    {
        "key": "reception",
        "packageType": PackageType.RECEPTION.value,
        "title": "Haldi / Mehendi / Sangeet / Reception",
        "startingPrice": 25000,
        "features": [
            "Trained DJ Artists",
            "Up to 10 musicians if needed",
            "Complete sound system for all venues",
        ],
    },
    {
        "key": "fullWedding",
        "packageType": PackageType.FULL_WEDDING.value,
        "title": "Full Wedding",
        "startingPrice": 80000,
        "features": [
            "Band, DJ and dhol across every function",
            "Professional sound system included",
            "15% discount compared to booking separately",
        ],
    },
]

FAQS = [
    {
        "question": "How far in advance should I book your band?",
        "answer": "Bookings must be made at least 30 days in advance; peak wedding dates fill earlier.",
    },
    {
        "question": "Do you travel to different cities?",
        "answer": "Yes. Travel charges depend on the distance to the venue.",
    },
    {
        "question": "Can we request specific songs?",
        "answer": "Yes. Add your song list under additional requests when booking.",
    },
    {
        "question": "What is your payment policy?",
        "answer": "Pay 30% advance to secure your booking; the balance is due on the event day.",
    },
]


def get_package(key: str) -> dict | None:
    for p in PACKAGES:
        if p["key"] == key:
            return p
    return None


def booking_options() -> dict:
    """Choices the booking form offers."""
    return {
        "packageTypes": [p.value for p in PackageType],
        "timeSlots": [t.value for t in TimeSlot],
        "ghodaBaggiChoices": list(GHODA_BAGGI_CHOICES),
        "maxDhols": MAX_DHOLS,
        "minimumAdvancePercent": 30,
    }
