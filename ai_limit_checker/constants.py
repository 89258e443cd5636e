"""Provider names, terminal markers, key codes, Z.ai URLs and selectors."""

# ── Providers ────────────────────────────────────────────────────────────────

PROVIDERS = ("claude", "gemini", "zai")

STATUS_RATE_LIMITED = "rate_limit_exceed"
STATUS_AVAILABLE = "available"

UNKNOWN = "Unknown"
UNKNOWN_SKIPPED = "Unknown (skipped)"

# ── Key Codes ────────────────────────────────────────────────────────────────

KEY_CLEAR_LINE = "\x15"  # Ctrl+U
KEY_ESCAPE = "\x1b"
KEY_ENTER = "\r"

# ── Claude CLI ───────────────────────────────────────────────────────────────

CLAUDE_READY_MARKERS = [
    "Type your message",
    "Type a message",
    "Tips for getting started",
    "? for shortcuts",
]

CLAUDE_USAGE_MARKERS = [
    "Current session",
    "only available for subscription",
]

CLAUDE_NOT_ENTITLED_PHRASE = "only available for subscription plans"

CLAUDE_SESSION_LABEL = "Current session"
CLAUDE_WEEK_LABEL = "Current week"
CLAUDE_SECTION_LABELS = ["Current session", "Current week", "Extra usage"]

# Session usage at or above this is treated as exhausted
CLAUDE_LIMIT_PERCENT = 100

# ── Gemini CLI ───────────────────────────────────────────────────────────────

GEMINI_ARGS = ["--yolo"]

GEMINI_READY_MARKERS = [
    "Type your message",
    "/exit",
]

GEMINI_STATS_MARKER = "Resets in"

GEMINI_LIMIT_PERCENT = 99.0

# ── Timings (ms) ─────────────────────────────────────────────────────────────

READY_TIMEOUT_MS = 15000
RESULT_TIMEOUT_MS = 10000

# ── Z.ai ─────────────────────────────────────────────────────────────────────

ZAI_SUBSCRIPTION_URL = "https://z.ai/manage-apikey/subscription"
ZAI_QUOTA_API = "api.z.ai/api/monitor/usage/quota/limit"
ZAI_TAB_SELECTOR = '[role="tab"]'
ZAI_USAGE_TAB_TEXT = "Usage"
ZAI_TOKENS_LIMIT = "TOKENS_LIMIT"

ZAI_LIMIT_PERCENT = 100

PAGE_SETTLE_MS = 3000
CLICK_SETTLE_MS = 2000
SELECTOR_TIMEOUT_MS = 10000
