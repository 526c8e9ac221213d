DATA_DIR = "data"
DB_FILE_NAME = "ceramic_pos.db"
TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1"

# ---- packaging normalization ----
# raw pieces-per-carton within this distance of an integer is a real piece count
INTEGRAL_TOLERANCE = 0.01
# max gap between candidate*sqm_per_piece and the raw value for an area reading
AREA_REINTERPRET_TOLERANCE = 0.05

# pieces_per_carton = sqm_per_piece * factor when packaging is missing (0 disables)
FALLBACK_CARTON_FACTOR = 4.0
# purchase orders assume this many cartons per pallet when the catalog has none
PURCHASE_CARTONS_PER_PALETTE = 36

# formats sold by the piece even when their packaging looks area-based
PIECE_PRICED_FORMATS = ("120x60",)

# ---- units ----
UNIT_ALIASES = {
    "PIECE": ("PIECE", "PCS", "PC", "PIECES", "U", "UNIT"),
    "AREA": ("AREA", "SQM", "M2", "M²", "SQ_M"),
    "CARTON": ("CARTON", "CRT", "CTN", "BOX", "COLIS"),
}

# ---- pricing ----
PRICE_LOOKUP_TIMEOUT = 3.0
PRICE_LOOKUP_WORKERS = 4
MARGIN_TYPES = ("PERCENT", "AMOUNT")
CUSTOMER_TYPES = ("RETAIL", "WHOLESALE")
