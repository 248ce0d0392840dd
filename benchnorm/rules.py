"""
Deterministic normalization rules.

Every tunable of the pipeline lives here so the behaviour is auditable in
one place. Order matters wherever a sequence is used for first-match lookups.
"""

# --- Header discovery ---
HEADER_SCAN_LIMIT = 15
DEFAULT_HEADER_INDEX = 7
HEADER_MARKERS = ("CPU Model", "GPU", "Resolution")

# --- Columns ---
COL_GPU = "GPU"
COL_CPU = "CPU Model"
COL_AVG_FPS = "Average FPS Score"
COL_SCORE = "Score"
COL_RAY_TRACING = "Ray Tracing"
COL_UPSCALING = "Upscaling"
COL_RESOLUTION = "Screen Resolution"
COL_GRAPHICS = "Graphics Settings"
COL_FRAME_GEN = "Frame Generation"
COL_VERDICT = "Verdict"

KNOWN_COLUMNS = (
    COL_GPU,
    COL_CPU,
    COL_AVG_FPS,
    COL_SCORE,
    COL_RAY_TRACING,
    COL_UPSCALING,
    COL_RESOLUTION,
    COL_GRAPHICS,
    COL_FRAME_GEN,
    COL_VERDICT,
)
REQUIRED_COLUMNS = (COL_GPU, COL_CPU)

# --- Field defaults ---
DEFAULT_RAY_TRACING = "Off"
DEFAULT_FRAME_GEN = "Disabled"
DEFAULT_UPSCALING = "None"
UNKNOWN = "Unknown"

# --- Aggregation limits ---
TOP_GPUS = 15
TOP_CPUS = 10
TOP_RESOLUTIONS = 6
RESOLUTION_TABLE_MIN_SAMPLES = 10

# (label, min, max); max None means open-ended
FPS_BUCKETS = (
    ("0-30", 0, 30),
    ("31-60", 31, 60),
    ("61-90", 61, 90),
    ("91-120", 91, 120),
    ("121-144", 121, 144),
    ("145+", 145, None),
)

# --- Verdicts ---
# Iteration order is the lookup order.
VERDICT_MAP = {
    "EXCELLENT": "Excellent",
    "GREAT": "Great",
    "GOOD": "Good",
    "AVERAGE": "Average",
    "FAIR": "Fair",
    "POOR": "Poor",
    "BAD": "Poor",
}

# --- Upscaling ---
UPSCALER_TOKENS = (
    ("DLSS", "DLSS"),
    ("FSR", "FSR"),
    ("XESS", "XESS"),
)
NO_UPSCALING_SUBSTRINGS = ("NONE",)
NO_UPSCALING_EXACT = ("IDK", "I GOT NO IDEA", "NOT APPLICABLE")

# --- GPU brand filter ---
GPU_BRAND_TOKENS = {
    "NVIDIA": ("NVIDIA", "RTX", "GTX"),
    "AMD": ("AMD", "RADEON", "RX"),
    "Intel": ("INTEL", "ARC"),
}
FILTER_ALL = "All"

# --- GPU cascade ---
# (substrings that must all be present in the uppercased name, canonical name)
# Most specific variant first inside each model family.
GPU_RULES = (
    # NVIDIA RTX 50
    (("5090",), "RTX 5090"),
    (("5080",), "RTX 5080"),
    (("5070", "TI"), "RTX 5070 Ti"),
    (("5070",), "RTX 5070"),
    (("5060",), "RTX 5060"),
    # NVIDIA RTX 40
    (("4090",), "RTX 4090"),
    (("4080", "SUPER"), "RTX 4080 Super"),
    (("4080",), "RTX 4080"),
    (("4070", "TI", "SUPER"), "RTX 4070 Ti Super"),
    (("4070", "TI"), "RTX 4070 Ti"),
    (("4070", "SUPER"), "RTX 4070 Super"),
    (("4070",), "RTX 4070"),
    (("4060", "TI"), "RTX 4060 Ti"),
    (("4060",), "RTX 4060"),
    # NVIDIA RTX 30
    (("3090", "TI"), "RTX 3090 Ti"),
    (("3090",), "RTX 3090"),
    (("3080", "TI"), "RTX 3080 Ti"),
    (("3080",), "RTX 3080"),
    (("3070", "TI"), "RTX 3070 Ti"),
    (("3070",), "RTX 3070"),
    (("3060", "TI"), "RTX 3060 Ti"),
    (("3060",), "RTX 3060"),
    # AMD RX 9000
    (("9070", "XT"), "RX 9070 XT"),
    (("9070",), "RX 9070"),
    # AMD RX 7000
    (("7900", "XTX"), "RX 7900 XTX"),
    (("7900", "XT"), "RX 7900 XT"),
    (("7800", "XT"), "RX 7800 XT"),
    (("7700", "XT"), "RX 7700 XT"),
    (("7600",), "RX 7600"),
    # AMD RX 6000
    (("6950", "XT"), "RX 6950 XT"),
    (("6900", "XT"), "RX 6900 XT"),
    (("6800", "XT"), "RX 6800 XT"),
    (("6800",), "RX 6800"),
    (("6700", "XT"), "RX 6700 XT"),
    (("6700",), "RX 6700"),
    (("6600", "XT"), "RX 6600 XT"),
    (("6600",), "RX 6600"),
    (("6500", "XT"), "RX 6500 XT"),
    (("6500",), "RX 6500"),
    # Intel Arc
    (("ARC", "B580"), "Arc B580"),
    (("ARC", "A770"), "Arc A770"),
    (("ARC", "A750"), "Arc A750"),
    (("ARC", "A580"), "Arc A580"),
    (("ARC", "A380"), "Arc A380"),
    (("ARC", "A310"), "Arc A310"),
)

# Leading digit of a bare GeForce model number -> product line
NVIDIA_SERIES_BY_DIGIT = {
    "5": "RTX",
    "4": "RTX",
    "3": "RTX",
    "2": "RTX",
    "1": "GTX",
}
