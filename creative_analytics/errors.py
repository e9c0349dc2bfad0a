"""
Error taxonomy shared by services and routers.
Each error carries the HTTP status it maps to; main.py renders them as {"error": message}.
"""


class CreativeAnalyticsError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationMissingError(CreativeAnalyticsError):
    """A required setting (token, API key) has not been configured."""
    status_code = 400


class NotFoundError(CreativeAnalyticsError):
    status_code = 404


class ExternalApiError(CreativeAnalyticsError):
    """Upstream ads API or language-model API returned an error."""
    status_code = 500


class MalformedAiResponseError(CreativeAnalyticsError):
    """Language-model output could not be parsed as the expected JSON object."""
    status_code = 500
