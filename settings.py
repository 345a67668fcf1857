from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 4141)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "0.0.0.0")

# Upstream completion provider (speaks the OpenAI chat completions protocol)
UPSTREAM_BASE_URL = config.get("UPSTREAM_BASE_URL", "https://api.openai.com/v1")
UPSTREAM_API_KEY = config.get("UPSTREAM_API_KEY", "")

# Timeout configuration
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Read timeout: Time between receiving data chunks, important for detecting stalled streams
READ_TIMEOUT = config.get("READ_TIMEOUT", 60.0)
# Request timeout: Total timeout for non-streaming requests
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 120.0)
# Stream timeout: Total timeout for streaming requests
STREAM_TIMEOUT = config.get("STREAM_TIMEOUT", 600.0)

# Admission control: minimum number of seconds between two accepted requests (0 disables)
RATE_LIMIT_SECONDS = config.get("RATE_LIMIT_SECONDS", 0.0)
# When true, requests arriving too early wait for their slot instead of failing with 429
RATE_LIMIT_WAIT = config.get("RATE_LIMIT_WAIT", False)

# Operator approval gate for every completion request
MANUAL_APPROVE = config.get("MANUAL_APPROVE", False)

# Model catalog
MODELS_FILE = config.get("MODELS_FILE", "models.json")
DEFAULT_MAX_OUTPUT_TOKENS = config.get("DEFAULT_MAX_OUTPUT_TOKENS", 4096)

# Stream tracing / debugging
STREAM_TRACE_ENABLED = config.get("STREAM_TRACE_ENABLED", False)
STREAM_TRACE_DIR = config.get("STREAM_TRACE_DIR", "stream_traces")
STREAM_TRACE_MAX_BYTES = config.get("STREAM_TRACE_MAX_BYTES", 262144)
