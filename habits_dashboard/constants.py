DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

ACTIVITY_WINDOW_DAYS = 90
GRID_WEEKS = 13
GRID_DAYS_PER_WEEK = 7

FREQUENCIES = ["daily", "weekly", "monthly"]
UNITS = ["times", "minutes", "hours", "pages", "glasses", "steps", "km"]

DEFAULT_CATEGORY_COLOR = "#4F46E5"
DEFAULT_CATEGORY_ICON = "📋"
CATEGORY_ICONS = ["📋", "💪", "📚", "🧘", "💧", "🏃", "🥗", "💤", "🎨", "💼", "🎵", "🌱"]

RECORD_ACTIONS = {
    "increment": "+",
    "decrement": "−",
    "reset": "↺",
    "complete": "✔",
}

THEMES = [
    "light", "dark", "cupcake", "bumblebee", "emerald", "corporate",
    "synthwave", "retro", "cyberpunk", "valentine", "halloween", "garden",
    "forest", "aqua", "lofi", "pastel", "fantasy", "wireframe", "black",
    "luxury", "dracula", "cmyk", "autumn", "business", "acid", "lemonade",
    "night", "coffee", "winter",
]
DARK_THEMES = {
    "dark", "synthwave", "halloween", "forest", "black", "luxury",
    "dracula", "business", "night", "coffee",
}
DEFAULT_THEME = "light"

INTENSITY_LABELS = ["No record", "Low", "Medium", "High", "Complete"]
