"""
Region and zone configuration for voter roll ingestion.
Zone codes match the seeded zone table.
"""

# Key: Voting Region label (from the roll), Value: zone code per election type.
# A None code means the region does not take part in that election.
REGION_ZONE_CODES = {
    "Mumbai": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "MUMBAI",
        "TRUSTEES": "MUMBAI",
    },
    "Raigad": {
        "YUVA_PANK": "RAIGAD",
        "KAROBARI_MEMBERS": "RAIGAD",
        "TRUSTEES": "RAIGAD",
    },
    "Karnataka & Goa": {
        "YUVA_PANK": "KARNATAKA_GOA",
        "KAROBARI_MEMBERS": "KARNATAKA_GOA",
        "TRUSTEES": "KARNATAKA_GOA",
    },
    "Bhuj": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "BHUJ",
        "TRUSTEES": "BHUJ",
    },
    "Kutch": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "KUTCH",
        "TRUSTEES": "ABDASA_GARDA",
    },
    "Anjar": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "ANJAR",
        "TRUSTEES": "ANJAR_ANYA_GUJARAT",
    },
    "Anya Gujarat": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "ANYA_GUJARAT",
        "TRUSTEES": "ANJAR_ANYA_GUJARAT",
    },
    "Abdasa & Garda": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "ABDASA",
        "TRUSTEES": "ABDASA_GARDA",
    },
    "Garda": {
        "YUVA_PANK": None,
        "KAROBARI_MEMBERS": "GARADA",
        "TRUSTEES": "ABDASA_GARDA",
    },
}

# Unmapped region labels fall back to this region (flagged in batch reports)
DEFAULT_REGION = "Mumbai"

# Known alternate spellings seen in source rolls
REGION_ALIASES = {
    "Karnataka-Goa": "Karnataka & Goa",
}

# Composite labels that are split on the voter's city.
# (composite label, cities of the matched region, matched region, fallback region)
CITY_SPLIT_REGIONS = [
    (
        "Anjar-Anya Gujarat",
        [
            "anjar",
            "adipur",
            "mandvi",
            "mundra",
            "gandhidham",
            "gandhi dham",
            "shenoi",
            "shinoi",
            "bhandariya",
            "bhadreshwar",
            "khedoi",
            "rapar",
            "varsamedi",
        ],
        "Anjar",
        "Anya Gujarat",
    ),
]

# Only these Yuva Pankh zones are open for this election cycle
YUVA_PANK_ALLOWED_CODES = ["KARNATAKA_GOA", "RAIGAD"]

YUVA_PANK_MIN_AGE = 18
YUVA_PANK_MAX_AGE = 39
MIN_VOTING_AGE = 18

# Reference zone table: (code, name, seats, election type, description)
ZONE_DEFINITIONS = [
    # Yuva Pankh
    ("RAIGAD", "Raigad", 3, "YUVA_PANK", "Raigad, Pune, Ratnagiri, Kolhapur, Sangli"),
    ("KARNATAKA_GOA", "Karnataka & Goa", 1, "YUVA_PANK", "Karnataka & Goa State"),
    # Karobari Samiti (21 seats)
    (
        "RAIGAD",
        "Raigad",
        4,
        "KAROBARI_MEMBERS",
        "Raigad (including Khapdar), Pune, Ratnagiri, Kolhapur, Sangli",
    ),
    (
        "MUMBAI",
        "Mumbai",
        6,
        "KAROBARI_MEMBERS",
        "Mumbai, Thane, Navi Mumbai, Nashik, Ahmednagar, Nagpur, Chandrapur, "
        "Madhya Pradesh, Rajasthan, West Bengal, Odisha, Haryana & Overseas",
    ),
    ("KARNATAKA_GOA", "Karnataka & Goa", 1, "KAROBARI_MEMBERS", "Karnataka & Goa state"),
    ("ABDASA", "Abdasa", 1, "KAROBARI_MEMBERS", "All villages of Abdasa taluka"),
    ("GARADA", "Garada", 2, "KAROBARI_MEMBERS", "Nakhatrana and Lakhpat talukas"),
    ("BHUJ", "Bhuj", 3, "KAROBARI_MEMBERS", "Bhuj, Mirzapar, Madhapar (taluka - Bhuj)"),
    (
        "ANJAR",
        "Anjar",
        1,
        "KAROBARI_MEMBERS",
        "Anjar, Adipur, Mandvi, Mundra, Gandhidham, Shinoi, Bhadreshwar, Khedoi",
    ),
    (
        "ANYA_GUJARAT",
        "Anya Gujarat",
        3,
        "KAROBARI_MEMBERS",
        "Ahmedabad, Valsad, Surat, Vadodara, Ankleshwar, Sachin, Anand, Mehsana, "
        "Bharuch, Dahegam, Kapadvanj, Jamnagar, Morbi, Rajkot",
    ),
    # Trustees (7 seats)
    (
        "MUMBAI",
        "Mumbai",
        2,
        "TRUSTEES",
        "Mumbai, Thane, Navi Mumbai, Nashik, Ahmednagar, Nagpur, Chandrapur, "
        "Madhya Pradesh, Rajasthan, West Bengal, Odisha, Haryana & Overseas",
    ),
    ("RAIGAD", "Raigad", 1, "TRUSTEES", "Raigad, Pune, Ratnagiri, Kolhapur, Sangli"),
    (
        "ABDASA_GARDA",
        "Abdasa & Garda",
        1,
        "TRUSTEES",
        "Abdasa, Garda, Naliya, Kothara, Tera, Jakhau, Nakhatrana and other villages",
    ),
    ("KARNATAKA_GOA", "Karnataka & Goa", 1, "TRUSTEES", "Karnataka & Goa State"),
    (
        "ANJAR_ANYA_GUJARAT",
        "Anjar & Anya Gujarat",
        1,
        "TRUSTEES",
        "Anjar, Mundra, Adipur, Mandvi, Gandhidham and Anya Gujarat towns",
    ),
    ("BHUJ", "Bhuj", 1, "TRUSTEES", "Bhuj, Mirzapar, Madhapar (taluka - Bhuj)"),
]
