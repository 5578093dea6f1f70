"""Constants for the form automation tools."""

# Answer value meaning "leave this field alone"
IGNORED_ANSWER = "-ignored-input-fields"

# Timeouts and Delays
SELECTOR_TIMEOUT = 30000  # ms (30 seconds)
NAVIGATION_TIMEOUT = 60000  # ms
TICK_DELAY = 0.5  # seconds between classify ticks
TYPE_DELAY_PER_CHAR = 0.01  # seconds

# Render stability probe
RENDER_TIMEOUT = 30000  # ms
RENDER_CHECK_INTERVAL = 250  # ms
RENDER_MIN_STABLE_CHECKS = 4

# Similarity Thresholds (0 to 100, thefuzz scale)
OPTION_FUZZY_THRESHOLD = 90

# Default selectors (Workday style markup)
LABEL_TAGS = "label[for]"
TEXT_BOX_TAGS = "input[type='text']"
RADIO_TAGS = "input[type='radio']"
BUTTON_TAGS = "button[aria-haspopup='listbox']"
NAV_TAGS = "button[data-automation-id]"
DROP_DOWN_ITEM_TAGS = "li[role='option']"

# Playwright error messages that mean the page went away under us
TRANSIENT_ERROR_PATTERNS = (
    "execution context was destroyed",
    "element is not attached",
    "not attached to the dom",
    "frame was detached",
    "cannot find context with specified id",
    "node is detached",
)
