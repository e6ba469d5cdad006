# nlu/gazetteer.py
"""
Bilingual keyword tables used by the entity extractor.
Table order is significant wherever the first match wins.
"""

# First matching pattern in table order wins (no longest-match)
DESTINATIONS = [
    ("Sharm El Sheikh", ["شرم", "شرم الشيخ", "sharm"]),
    ("Hurghada", ["الغردقة", "غردقة", "hurghada"]),
    ("Dahab", ["دهب", "dahab"]),
    ("Ain Sokhna", ["العين السخنة", "عين سخنة", "ain sokhna", "sokhna"]),
    ("Sahl Hasheesh", ["سهل حشيش", "sahl hasheesh", "hasheesh"]),
    ("Istanbul", ["اسطنبول", "istanbul"]),
    ("Bali", ["بالي", "bali"]),
    ("Beirut", ["بيروت", "beirut"]),
]

KNOWN_HOTELS = [
    "movenpick", "موفنبيك",
    "hilton", "هيلتون",
    "sheraton", "شيراتون",
    "marriott", "ماريوت",
    "intercontinental",
    "albatros", "الباتروس",
    "pickalbatros",
    "sunrise",
    "jaz",
    "cleopatra", "كليوباترا",
    "dreams",
    "xperience",
    "charmillion",
    "concorde",
    "parrotel",
    "tamra",
    "marina",
]

MEAL_PLANS = [
    ("AI", ["all inclusive", "شامل", "شامل كل شيء", "الشامل"]),
    ("FB", ["full board", "فطار وغدا وعشا", "ثلاث وجبات"]),
    ("HB", ["half board", "فطار وغدا", "نص شامل", "وجبتين"]),
    ("BB", ["bed and breakfast", "فطار فقط", "الفطار"]),
]

ROOM_TYPES = [
    ("single", ["single", "فردي", "فردية", "شخص واحد"]),
    ("double", ["double", "مزدوج", "مزدوجة", "شخصين"]),
    ("triple", ["triple", "ثلاثي", "ثلاثية", "ثلاث اشخاص"]),
    ("family", ["family", "عائلية", "عائلي"]),
]

AMENITIES = [
    ("pool", ["pool", "حمام سباحة", "مسبح"]),
    ("beach", ["beach", "شاطئ", "بحر"]),
    ("spa", ["spa", "سبا", "مساج"]),
    ("gym", ["gym", "جيم", "رياضة", "fitness"]),
    ("wifi", ["wifi", "واي فاي", "انترنت", "internet"]),
    ("restaurant", ["restaurant", "مطعم", "dining"]),
    ("kids_club", ["kids club", "نادي اطفال", "children"]),
    ("water_park", ["water park", "مدينة مائية", "aqua park"]),
]

MONTHS_AR = [
    "يناير", "فبراير", "مارس", "ابريل", "مايو", "يونيو",
    "يوليو", "اغسطس", "سبتمبر", "اكتوبر", "نوفمبر", "ديسمبر",
]

MONTHS_EN = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# Common Arabic misspellings of destination names -> destination tokens
# used by the retriever (applied in order, plain find/replace)
DESTINATION_SPELLING_FIXES = [
    ("الغردقه", "hurghada"),
    ("غردقه", "hurghada"),
    ("الغرقدة", "hurghada"),
    ("شرم الشيح", "sharm_el_sheikh"),
    ("شرم اشيخ", "sharm_el_sheikh"),
    ("اسطمبول", "istanbul"),
    ("استنبول", "istanbul"),
    ("إسطنبول", "istanbul"),
    ("بالى", "bali"),
    ("بيروط", "beirut"),
    ("العين السخنه", "ain_sokhna"),
    ("السخنه", "ain_sokhna"),
    ("دهاب", "dahab"),
    ("سهل حشيشه", "sahl_hashish"),
]
