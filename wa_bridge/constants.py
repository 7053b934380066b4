"""WhatsApp Web URLs, DOM selectors, Chromium flags and profile lock names."""

# ── URLs ─────────────────────────────────────────────────────────────────────

WHATSAPP_WEB_URL = "https://web.whatsapp.com/"

# ── HTTP Facade ──────────────────────────────────────────────────────────────

ROOT_MESSAGE = "WhatsApp microservice up and running"

# ── Selectors ────────────────────────────────────────────────────────────────

SELECTORS = {
    # Login screen: the QR container carries the raw pairing code in data-ref
    "qr_container": "div[data-ref]",
    # Logged-in screen
    "chat_list": '[aria-label="Chat list"], #pane-side',
}

# ── Page Scripts ─────────────────────────────────────────────────────────────

# Returns the pairing code currently shown on the login screen, or null.
JS_READ_QR_CODE = """
() => {
    const el = document.querySelector('div[data-ref]');
    return el ? el.getAttribute('data-ref') : null;
}
"""

# Projects WhatsApp Web's own chat collection into plain objects.
JS_GET_CHATS = """
() => {
    const collections = window.require('WAWebCollections');
    return collections.Chat.getModelsArray().map((c) => ({
        id: { _serialized: c.id._serialized },
        name: c.name || null,
        formattedTitle: c.formattedTitle || null,
        isGroup: Boolean(c.isGroup),
    }));
}
"""

# ── Chromium ─────────────────────────────────────────────────────────────────

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
    "--disable-background-networking",
]

# Probed in order when no explicit executable path is configured.
CHROMIUM_CANDIDATE_PATHS = [
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/bin/google-chrome-stable",
    "/usr/bin/google-chrome",
    "/opt/google/chrome/chrome",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
]

# ── Profile Lock Artifacts ───────────────────────────────────────────────────

PROFILE_LOCK_FILES = ["SingletonLock", "SingletonCookie"]
PROFILE_SOCKET_PREFIX = "SingletonSocket"

# ── Lifecycle Events ─────────────────────────────────────────────────────────

EVENT_QR = "qr"
EVENT_READY = "ready"
EVENT_AUTHENTICATED = "authenticated"
EVENT_AUTH_FAILURE = "auth_failure"
EVENT_DISCONNECTED = "disconnected"

LIFECYCLE_EVENTS = [
    EVENT_QR,
    EVENT_READY,
    EVENT_AUTHENTICATED,
    EVENT_AUTH_FAILURE,
    EVENT_DISCONNECTED,
]

UNKNOWN_REASON = "unknown"
