"""
Constants for onboarding, connections and research matching
"""

DEFAULT_CONNECTION_MESSAGE = "would like to connect with you for potential collaboration"

# Startup onboarding form -> derived goals/needs
PRODUCT_TYPE_GOALS = {
    "Diagnostic": "Develop diagnostic solutions",
    "Therapeutic": "Create therapeutic interventions",
    "Device": "Build medical devices",
    "Software": "Develop healthcare software",
    "Digital Therapeutic": "Create digital therapeutic solutions",
}

BUSINESS_NEED_DESCRIPTIONS = {
    "Reimbursement Strategy": "Reimbursement strategy guidance",
    "IP & Licensing": "Intellectual property support",
    "Academic Collaboration": "Academic partnerships",
    "Tech Transfer": "Technology transfer assistance",
    "Commercialization Support": "Commercialization guidance",
}

DEFAULT_GOAL = "Advance product development"
DEFAULT_NEED = "General business support"

REGULATORY_STATUSES = [
    "None", "Pre-IDE", "IDE Filed", "FDA Submission", "510(k)", "De Novo", "PMA", "Post-Market"
]

NIH_FUNDING_INTEREST = ["Yes", "No", "Interested"]

# NIH RePORTER
NIH_MAX_LIMIT = 500

REGION_STATES = {
    "Southeast": ["SC", "NC", "GA", "FL", "TN", "AL", "MS", "KY", "VA", "WV"],
    "Northeast": ["NY", "MA", "CT", "RI", "VT", "NH", "ME", "PA", "NJ"],
    "West Coast": ["CA", "OR", "WA"],
    "Midwest": ["IL", "IN", "IA", "KS", "MI", "MN", "MO", "NE", "ND", "OH", "SD", "WI"],
    "Southwest": ["TX", "AZ", "NM", "OK", "AR", "LA"],
    "Mountain West": ["CO", "UT", "NV", "ID", "MT", "WY"],
}

ADJACENT_STATES = {
    "SC": ["NC", "GA"],
    "NC": ["SC", "TN", "VA", "GA"],
    "GA": ["FL", "AL", "TN", "NC", "SC"],
    "CA": ["NV", "AZ", "OR"],
    "NY": ["CT", "MA", "VT", "NJ", "PA"],
    "TX": ["OK", "AR", "LA", "NM"],
    "FL": ["GA", "AL"],
}

# Full state names accepted when a location is used for a geographic search
STATE_NAMES = ["California", "Texas", "Florida", "New York"]

MEDTECH_KEYWORDS = [
    "medical device",
    "diagnostic",
    "imaging",
    "sensor",
    "wearable",
    "telemedicine",
    "digital health",
    "mhealth",
    "biomedical engineering",
    "medical technology",
    "health technology",
    "clinical device",
]

MEDICAL_TERM_PATTERN = (
    r"\b(cardio|cancer|oncology|neuro|pediatric|orthopedic|diabetes|mental|brain|heart|lung|"
    r"kidney|liver|blood|immune|genetic|drug|therapy|treatment|diagnosis|clinical|trial|patient|"
    r"disease|disorder|syndrome)\b"
)
