# module reservation.catalog.data
"""Catalogue embarqué, utilisé quand Supabase n'est pas configuré (dev, tests)."""

_ROOM_AMENITIES = [
    "Flat-screen TV",
    "Refrigerator",
    "Free bottled water",
    "Toiletries",
    "Blackout curtains",
    "Air conditioning",
    "Hair dryer",
    "Non-smoking",
]

ROOM_RECORDS = [
    {
        "id": "superior-twin",
        "type": "room",
        "name": "Superior Twin",
        "roomType": "2 persons",
        "bedType": "1 single & 1 double",
        "area": "23.1",
        "capacity": 2,
        "weekdayPrice": 77000,
        "weekendPrice": 99000,
        "images": ["/images/contents/room01_img01.jpg", "/images/contents/room01_img02.jpg"],
        "amenities": ["Bathtub with shower"] + _ROOM_AMENITIES,
    },
    {
        "id": "superior-triple",
        "type": "room",
        "name": "Superior Triple",
        "roomType": "3 persons",
        "bedType": "3 singles",
        "area": "23.1",
        "capacity": 3,
        "weekdayPrice": 66000,
        "weekendPrice": 99000,
        "images": ["/images/contents/room02_img01.jpg", "/images/contents/room02_img02.jpg"],
        "amenities": ["Bathtub with shower"] + _ROOM_AMENITIES,
    },
    {
        "id": "superior-deluxe",
        "type": "room",
        "name": "Superior Deluxe",
        "roomType": "4 persons",
        "bedType": "2 singles & 1 double",
        "area": "23.1",
        "capacity": 4,
        "weekdayPrice": 77000,
        "weekendPrice": 121000,
        "images": ["/images/contents/room03_img01.jpg", "/images/contents/room03_img02.jpg"],
        "amenities": list(_ROOM_AMENITIES),
    },
    {
        "id": "korean-superior",
        "type": "room",
        "name": "Korean Superior",
        "roomType": "5 persons",
        "bedType": "Ondol floor & 4 bedding sets",
        "area": "23.1",
        "capacity": 5,
        "weekdayPrice": 77000,
        "weekendPrice": 121000,
        "images": ["/images/contents/room04_img01.jpg", "/images/contents/room04_img02.jpg"],
        "amenities": list(_ROOM_AMENITIES),
    },
]

SEMINAR_RECORDS = [
    {"id": "nuri", "type": "seminar", "name": "Nuri", "location": "1F / Small meeting room",
     "maxPeople": 10, "area": "85.95", "price": 308000,
     "images": ["/images/contents/seminar01_img01.jpg"]},
    {"id": "garam", "type": "seminar", "name": "Garam", "location": "1F / Small meeting room",
     "maxPeople": 10, "area": "85.95", "price": 308000,
     "images": ["/images/contents/seminar01_img02.jpg"]},
    {"id": "ocean", "type": "seminar", "name": "Ocean", "location": "2F / Small meeting room",
     "maxPeople": 20, "area": "59.28", "price": 154000,
     "images": ["/images/contents/seminar02_img01.jpg"]},
    {"id": "grand-ballroom", "type": "seminar", "name": "Grand Ballroom", "location": "2F / Grand ballroom",
     "maxPeople": 250, "area": "543.15", "price": 1386000,
     "images": ["/images/contents/seminar03_img01.jpg"]},
    {"id": "seagull", "type": "seminar", "name": "Seagull", "location": "8F / Medium meeting room",
     "maxPeople": 100, "area": "180", "price": 693000,
     "images": ["/images/contents/seminar04_img01.jpg"]},
    {"id": "jasmine", "type": "seminar", "name": "Jasmine", "location": "8F / Medium meeting room",
     "maxPeople": 50, "area": "138.84", "price": 462000,
     "images": ["/images/contents/seminar05_img01.jpg"]},
    {"id": "clover", "type": "seminar", "name": "Clover", "location": "8F / Medium meeting room",
     "maxPeople": 80, "area": "173", "price": 462000,
     "images": ["/images/contents/seminar06_img01.jpg"]},
]
