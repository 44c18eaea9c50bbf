# Package Info
VERSION = "0.1.0"
VERSION_PREFIX = "kmu-notice"

# Paging
PAGE_SIZE = 10  # Items per page on RSS boards (numbering depends on it)
PINNED_NOTICE_NO = -1  # Sequence number for pinned (un-numbered) notices
DEFAULT_MAX_PAGE_WALK = 500  # Upper bound on pages walked by count queries

# Network
DEFAULT_REQUEST_TIMEOUT = 5.0  # Seconds
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# Cache
DEFAULT_CACHE_TTL = 300.0  # Seconds (5 minutes)
# Timing samples kept per operation by the performance monitor
PERFORMANCE_SAMPLE_LIMIT = 1000

# Selectors
NOTICE_BOARD_ROW_SELECTOR = "table.board_st tbody tr"
BOARD_TABLE_ROW_SELECTOR = "table.board-table tbody tr"
TOTAL_COUNT_SELECTOR = "div.srch_counts > strong"

# Minimum cell counts per tabular row
NOTICE_BOARD_MIN_CELLS = 4
BOARD_TABLE_MIN_CELLS = 5

# Display
PINNED_NOTICE_LABEL = "[공지]"

# Default Configuration Values
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "logs/kmu_notice.log"
DEFAULT_LOG_FORMAT = "text"  # text or json
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_LOG_BACKUP_COUNT = 5
