# inventory_costing/constants.py
DATA_DIR = "data"
DB_FILE_NAME = "costing.db"
LOG_DIR = "logs"
EVENT_LOG_FILE_NAME = "costing_events.log"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

PURCHASE_SUMMARY_ID = "totalPurchaseCost"

# Sale order statuses as entered by the order desk.
STATUS_PROCESSING = "Parcel Processing"
STATUS_SENT = "Parcel Sent"
STATUS_DELIVERED = "Delivered"
STATUS_RETURNED = "Returned"
SALE_STATUSES = (STATUS_PROCESSING, STATUS_SENT, STATUS_DELIVERED, STATUS_RETURNED)

DATE_FORMAT = "%Y-%m-%d"
AVG_COST_PLACES = 2

# |a - b| <= EPSILON counts as "unchanged" for monitored snapshot fields
EPSILON = 1e-9

# upper bound for concurrent source reads
MAX_READ_THREADS = 5
