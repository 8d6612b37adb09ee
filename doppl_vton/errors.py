"""Error taxonomy for try-on generation.

Every error carries a stable ``code`` and renders a localized, human-readable
message via :meth:`TryOnError.user_message`. None of these are retried.
"""

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "invalid_credential": "Please enter a valid Gemini API key.",
        "invalid_credential_format": "The API key format looks wrong (it should start with '{prefix}').",
        "no_image_produced": "The model did not return an image. Try another model or different photos.",
        "authorization_denied": "Permission denied (403). Check the API key or your Google Cloud project settings.",
        "rate_limited": "Too many requests (rate limit). Please try again later.",
        "invalid_request": "Invalid request (400). The image format is unsupported or too large.",
        "file_read_error": "Image processing failed, please try another file.",
        "provider_no_detail": "Generation failed ({error_type}). Check your network connection or try again later.",
    },
    "zh-TW": {
        "invalid_credential": "請輸入有效的 Gemini API Key。",
        "invalid_credential_format": "API Key 格式似乎不正確 (應以 '{prefix}' 開頭)。",
        "no_image_produced": "模型生成失敗，未返回圖像數據。請嘗試更換模型或圖片。",
        "authorization_denied": "權限被拒 (403)。請檢查 API Key 或 Google Cloud 專案設定。",
        "rate_limited": "請求過於頻繁 (Rate Limit)。請稍後再試。",
        "invalid_request": "請求無效 (400)。圖片格式不支援或過大。",
        "file_read_error": "圖片處理失敗，請嘗試其他檔案。",
        "provider_no_detail": "生成失敗 ({error_type})。請檢查網路連線或稍後再試。",
    },
}

DEFAULT_LOCALE = "en"


class TryOnError(Exception):
    """Base class for all classified generation errors."""

    code = "try_on_error"
    message_key: str | None = None

    def __init__(self, message: str | None = None, **params):
        self.params = params
        super().__init__(message or self.user_message())

    def user_message(self, locale: str = DEFAULT_LOCALE) -> str:
        if self.message_key is None:
            return str(self)
        catalog = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
        return catalog[self.message_key].format(**self.params)


class InvalidCredential(TryOnError):
    """Empty or malformed API key. User-fixable."""

    code = "invalid_credential"
    message_key = "invalid_credential"

    def __init__(self, message: str | None = None, prefix: str | None = None):
        if prefix is not None:
            self.message_key = "invalid_credential_format"
            super().__init__(message, prefix=prefix)
        else:
            super().__init__(message)


class NoImageProduced(TryOnError):
    """The model replied with text only."""

    code = "no_image_produced"
    message_key = "no_image_produced"

    def __init__(self, message: str | None = None, analysis=None):
        self.analysis = analysis
        super().__init__(message)


class AuthorizationDenied(TryOnError):
    code = "authorization_denied"
    message_key = "authorization_denied"


class RateLimited(TryOnError):
    code = "rate_limited"
    message_key = "rate_limited"


class InvalidRequest(TryOnError):
    code = "invalid_request"
    message_key = "invalid_request"


class UnclassifiedProviderError(TryOnError):
    """Any other provider failure; the original message is passed through.

    Errors without a message (e.g. timeouts) fall back to a catalog text
    naming the error type.
    """

    code = "provider_error"

    def __init__(self, message: str | None = None, error_type: str | None = None):
        if not message:
            self.message_key = "provider_no_detail"
            super().__init__(None, error_type=error_type or "unknown error")
        else:
            super().__init__(message)


class FileReadError(TryOnError):
    """An uploaded file could not be read as an image."""

    code = "file_read_error"
    message_key = "file_read_error"

    def __init__(self, message: str | None = None, path=None):
        self.path = path
        super().__init__(message)
