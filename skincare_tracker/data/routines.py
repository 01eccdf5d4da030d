"""Default routine products

Seeded into a user's routine document on first use. Each entry lacks the
per-user fields (id, routineType, frequency, enabled); the routine service
fills them in when importing.
"""

CLEANSER = {
    "step": 1,
    "title": "Deep Cleansing",
    "accessCode": "BYOMA Creamy Jelly Cleanser",
    "function": "Gentle cleanse that respects the skin barrier and lifts away impurities.",
    "usage": "Massage one pump onto damp skin. Rinse with water.",
    "image": "/images/limpiador.png",
}

NIGHT_MOISTURIZER = {
    "step": 3,
    "title": "Night Repair",
    "accessCode": "The Ordinary Natural Moisturizing Factors + HA",
    "function": "Seals in the actives with deep, lasting nourishment. Final step of the night.",
    "usage": "Apply a generous layer over face and neck.",
    "image": "/images/crema_ordinary.webp",
}

DAILY_ROUTINE = [
    CLEANSER,
    {
        "step": 2,
        "title": "Hydration Boost",
        "accessCode": "BYOMA Hydrating Serum",
        "function": "Deep hydration that reinforces the skin barrier before the day.",
        "usage": "Press 3-4 drops into clean, dry skin until absorbed.",
        "image": "/images/serumByoma.png",
    },
    {
        "step": 3,
        "title": "Seal & Comfort",
        "accessCode": "BYOMA Moisturizing Gel Cream",
        "function": "Locks in the serum and keeps the skin hydrated all day.",
        "usage": "Massage an almond-sized amount over face and neck.",
        "image": "/images/cremaByoma.png",
    },
    {
        "step": 4,
        "title": "Active Defense",
        "accessCode": "Caudalie Vinosun Fluid SPF50+",
        "function": "Essential UV protection against sun damage.",
        "usage": "LAST STEP. Apply generously over face and neck.",
        "image": "/images/sol.png",
    },
]

NIGHTLY_ROUTINE_WITH_LACTIC = [
    CLEANSER,
    {
        "step": 2,
        "title": "Night Renewal",
        "accessCode": "The Ordinary Lactic Acid 5% + HA",
        "function": "(2-3 nights a week.) Gentle micro-exfoliation that improves texture and glow.",
        "usage": "Apply 2-3 drops. Let it absorb before the next step.",
        "image": "/images/latico.png",
    },
    NIGHT_MOISTURIZER,
]

NIGHTLY_ROUTINE_WITHOUT_LACTIC = [
    CLEANSER,
    {
        "step": 2,
        "title": "Hydration Boost",
        "accessCode": "The Ordinary Hyaluronic Acid 2% + B5",
        "function": "Holds water in the skin for intense hydration during overnight repair.",
        "usage": "Apply a few drops over face and neck.",
        "image": "/images/ordinary_hialuronico.webp",
    },
    NIGHT_MOISTURIZER,
]

# Weekdays that get the lactic acid night
LACTIC_NIGHTS = ("Wednesday", "Sunday")
