"""Constants used throughout the application."""

# Idea batch limits
MAX_IDEAS = 5

# Stream wire format
RECORD_SEPARATOR = "\n"
STREAM_ENCODING = "utf-8"

# Session budgets (seconds)
DEFAULT_ANALYSIS_TIMEOUT = 45.0
DEFAULT_UPLOAD_TIMEOUT = 30.0
CONNECT_TIMEOUT = 10.0

# Idea-Generation Endpoint
DEFAULT_IDEA_ENDPOINT_URL = "http://localhost:3000/api/analyze-image"

# Cloudinary object store
CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
UPLOAD_TRANSFORMATION = "w_800,q_auto"
MIN_IMAGE_BYTES = 100

# Languages offered by the picker: code -> (label, flag, short)
LANGUAGES = {
    "en": ("English", "🇺🇸", "EN"),
    "zh": ("中文", "🇨🇳", "ZH"),
    "fr": ("Français", "🇫🇷", "FR"),
    "ja": ("日本語", "🇯🇵", "JA"),
}
DEFAULT_LANGUAGE = "en"

# User-facing messages
QUOTA_MESSAGE = "Daily analysis quota reached. Please try again tomorrow."
EMPTY_RESULT_MESSAGE = "No ideas were generated for this photo. Please try again."
TIMEOUT_MESSAGE = "Analysis took too long. Please try again."
NETWORK_MESSAGE = "Could not reach the idea service. Check your connection and try again."
UNEXPECTED_MESSAGE = "Analysis failed unexpectedly. Please try again."
LOADING_MESSAGE = "Collecting inspiration, please wait..."
