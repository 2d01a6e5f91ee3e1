"""All magic values live here — no inline literals anywhere else."""

# Environment variable names
ENV_API_KEY = "DASHSCOPE_API_KEY"
ENV_BASE_URL = "OPENAI_BASE_URL"
ENV_MODEL = "AI_MODEL"
ENV_REQUEST_TIMEOUT_MS = "REQUEST_TIMEOUT_MS"
ENV_MAX_RETRIES = "MAX_RETRIES"
ENV_RETRY_DELAY_MS = "RETRY_DELAY_MS"
ENV_MAX_TOKENS = "MAX_TOKENS"
ENV_TEMPERATURE = "TEMPERATURE"
ENV_SAVE_RESPONSES = "SAVE_RESPONSES"
ENV_RESPONSE_DIR = "RESPONSE_DIR"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_APP_ENV = "APP_ENV"
ENV_PDFTOPPM_PATH = "PDFTOPPM_PATH"
ENV_IMAGEMAGICK_PATH = "IMAGEMAGICK_PATH"
ENV_CONVERT_TIMEOUT = "CONVERT_TIMEOUT"
ENV_JPEG_QUALITY = "JPEG_QUALITY"
ENV_PROCESS_DIR = "PROCESS_DIR"
ENV_OUTPUT_DIR = "OUTPUT_DIR"
ENV_TEST_IMAGE_PATH = "TEST_IMAGE_PATH"

REQUIRED_ENV_VARS = (ENV_API_KEY, ENV_BASE_URL, ENV_MODEL)

# Defaults
DEFAULT_REQUEST_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.1
DEFAULT_RESPONSE_DIR = "./responses"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_PDFTOPPM_PATH = "pdftoppm"
DEFAULT_IMAGEMAGICK_PATH = "convert"
DEFAULT_CONVERT_TIMEOUT = 120
DEFAULT_JPEG_QUALITY = 70
DEFAULT_PROCESS_DIR = "./process"
DEFAULT_OUTPUT_DIR = "./output"

TRUE_VALUES = ("true",)

# LOG_LEVEL value → stdlib logging level name, ordered error < warn < info < debug
LOG_LEVELS = {
    "error": "ERROR",
    "warn": "WARNING",
    "info": "INFO",
    "debug": "DEBUG",
}

# Image encoding
DEFAULT_MIME_TYPE = "image/jpeg"
MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}
DATA_URL_PREFIX = "data:image/"
DATA_URL_TEMPLATE = "data:%s;base64,%s"
URL_SCHEMES = ("http", "https")

# Chat message roles / content part types
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
PART_TEXT = "text"
PART_IMAGE_URL = "image_url"

# Response handling
JSON_BLOCK_PATTERN = r"```json\n([\s\S]*?)\n```"
RESPONSE_FILE_PREFIX = "response_"
RESPONSE_FILE_SUFFIX = ".json"
HEALTH_STATUS_OK = "healthy"

# PDF pipeline
PDFTOPPM_JPEG_FLAG = "-jpeg"
IMAGEMAGICK_APPEND_FLAG = "-append"
IMAGEMAGICK_QUALITY_FLAG = "-quality"
PAGE_PREFIX = "page"
PAGE_GLOB = "page-*.jpg"
MERGED_IMAGE_NAME = "merged.jpg"
COMPRESSED_IMAGE_NAME = "compressed.jpg"
STDERR_EXCERPT_LEN = 200

# Error messages
MSG_MISSING_ENV = "Missing required environment variables: %s"
MSG_INVALID_NUMBER = "%s must be a number, got %r"
MSG_INVALID_LOG_LEVEL = "LOG_LEVEL must be one of %s, got %r"
MSG_INVALID_MAX_RETRIES = "MAX_RETRIES must be at least 1, got %d"
MSG_INVALID_QUALITY = "JPEG_QUALITY must be between 1 and 100, got %d"
MSG_IMAGE_NOT_FOUND = "Image file not found: %s"
MSG_IMAGE_UNREADABLE = "Image file could not be read: %s (%s)"
MSG_ANALYSIS_FAILED = "Land certificate analysis failed: %s"
MSG_PDF_NOT_FOUND = "PDF file not found: %s"
MSG_TOOL_NOT_FOUND = "External tool not found: %s"
MSG_TOOL_TIMEOUT = "%s timed out after %ss"
MSG_TOOL_FAILED = "%s exited with code %s: %s"
MSG_NO_PAGES = "pdftoppm produced no pages for %s"
MSG_NO_INPUT_PAGES = "No page images to merge"

# Log messages
MSG_CLIENT_READY = "Analysis client ready (model=%s)"
MSG_ANALYSIS_START = "Starting land certificate analysis…"
MSG_ANALYSIS_DONE = "Analysis completed successfully"
MSG_ANALYSIS_ERROR = "Analysis failed: %s"
MSG_ATTEMPT = "API call attempt %d/%d"
MSG_ATTEMPT_FAILED = "API call attempt %d failed: %s"
MSG_NOT_RETRYABLE = "Error is not retryable, giving up"
MSG_NO_JSON_BLOCK = "Could not extract JSON from response"
MSG_IMAGE_ENCODED = "Converted %s to base64 data URL (%d bytes)"
MSG_SAVING_RESPONSE = "Saving response to %s"
MSG_SAVE_FAILED = "Failed to save response: %s"
MSG_RUNNING_TOOL = "Running %s"
MSG_RENDERED = "Rendered %s → %s"
MSG_HEALTH = "Service health: %s"

# Prompts
SYSTEM_PROMPT = """
Bạn là trợ lý AI chuyên về phân tích dữ liệu bất động sản.

Nhiệm vụ của bạn là:

Đọc và phân tích thông tin từ ảnh chụp Giấy chứng nhận quyền sử dụng đất, quyền sở hữu nhà ở và tài sản khác gắn liền với đất (thường gọi là "sổ đỏ").

phân loại và đánh nhãn loại tài liệu này trong metadata json

Xác định và trích xuất các trường thông tin quan trọng bao gồm nhưng không giới hạn:

Thông tin chủ sở hữu
Địa chỉ thửa đất
Số thửa, số tờ bản đồ
Diện tích
Mục đích sử dụng
Hình thức sử dụng (riêng, chung)
Thời hạn sử dụng
Nguồn gốc sử dụng
Tài sản gắn liền với đất (nếu có)

Tổng hợp và xuất dữ liệu vào định dạng JSON chuẩn, dễ dàng tích hợp vào hệ thống quản lý tài sản ngân hàng hoặc phần mềm CRM.

Trả kết quả dưới dạng đối tượng JSON duy nhất, có cấu trúc rõ ràng và dễ đọc.
""".strip()

FOLLOW_UP_PROMPT = "What can you do next?"
