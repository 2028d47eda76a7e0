"""Internal constants shared across the library."""

USER_AGENT = "autolot-importer/1.0"

CATALOG_ID_PREFIX = "car"
IMPORT_ID_PREFIX = "imp"
IMAGE_ID_PREFIX = "img"
LEAD_ID_PREFIX = "lead"

MIN_VEHICLE_YEAR = 1900

# ------------------------------------------------------------------
# Body type inference for imported listings  (model keyword → body type)
# ------------------------------------------------------------------

# Checked in order; the first keyword found as a whole word in the lower-cased
# model name wins.
BODY_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("truck", ("silverado", "colorado", "sierra", "f-150", "f-250", "ram", "tacoma", "tundra", "ranger")),
    (
        "suv",
        (
            "tahoe",
            "suburban",
            "traverse",
            "equinox",
            "blazer",
            "trailblazer",
            "trax",
            "bolt",
            "cr-v",
            "rav4",
            "explorer",
            "model y",
        ),
    ),
    ("coupe", ("camaro", "corvette", "mustang")),
    ("convertible", ("convertible", "cabrio", "cabriolet", "roadster")),
    ("hatchback", ("spark", "sonic", "hatch", "hatchback")),
)
DEFAULT_BODY_TYPE = "sedan"

# ------------------------------------------------------------------
# Financing
# ------------------------------------------------------------------

VALID_LOAN_TERMS: tuple[int, ...] = (24, 36, 48, 60, 72, 84)
DEFAULT_LOAN_TERM = 60
