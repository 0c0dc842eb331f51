# Central configuration for the dashboard
# Adjust these settings as needed; the sidebar only exposes timeframe/metric.

# Maximum number of samples kept in the stream buffer
BUFFER_CAPACITY = 1000

# Spacing of the seeded history in milliseconds (one sample per minute)
BACKFILL_SPACING_MS = 60 * 1000

# Tick period in milliseconds; also drives the page auto-refresh
TICK_MS = 1000

# Upper bound of ticks run in one rerun after the page was idle
MAX_CATCHUP_TICKS = 60

# Selectable timeframes: label -> number of samples
TIMEFRAMES = {
    "1h": 60,
    "6h": 360,
    "24h": 1440,
}
DEFAULT_TIMEFRAME = "1h"

# Metrics selectable for the main trend chart
CHART_METRICS = ("users", "revenue", "connections")
DEFAULT_METRIC = "users"

# Running counters shown on the KPI cards at startup
INITIAL_COUNTERS = {
    "totalUsers": 1247832,
    "revenue": 89432.50,
    "activeConnections": 15647,
    "throughput": 2341,
}

# Seed for the random source; None draws from OS entropy
RANDOM_SEED = None

# Rows shown in the recent data table
RECENT_ROWS = 10

LOG_LEVEL = "INFO"
