"""
Shared REST client for the sync backend.
Handles bearer auth, retries on transport errors and the response envelope.
"""
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import get_settings
from core.exceptions import ApiError, AuthenticationError, ConfigurationError
from core.logger import setup_logger

logger = setup_logger(__name__)

# Only transport failures are retried; HTTP error responses are final
RETRYABLE_EXCEPTIONS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendClient:
    """REST client for the backend API with retry logic."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[int] = None,
        max_attempts: int = 3,
        retry_wait: float = 1.0,
    ):
        """
        Initialize REST API client.

        Args:
            base_url: Backend API root (defaults to API_BASE_URL)
            token: Bearer token (defaults to API_TOKEN)
            timeout: Request timeout in seconds
            max_attempts: Attempts per request for transport errors
            retry_wait: Backoff multiplier in seconds (0 disables waiting)

        Raises:
            ConfigurationError: If no API token is available
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token or settings.api_token
        self.timeout = timeout or settings.request_timeout

        if not self.token:
            raise ConfigurationError(
                "API_TOKEN environment variable not set",
                details={"required_key": "API_TOKEN"}
            )

        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=retry_wait, min=0, max=10),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            reraise=True,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        return requests.request(
            method,
            url,
            headers=self.headers,
            timeout=self.timeout,
            **kwargs
        )

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """
        Call a backend endpoint and unwrap the {status, data, message} envelope.

        Args:
            method: HTTP method
            endpoint: Path relative to the API root (e.g. "/ebay/transactions")
            params: Query string parameters
            json_body: JSON request body

        Returns:
            The envelope's `data` member, or the whole body when absent

        Raises:
            AuthenticationError: On HTTP 401
            ApiError: On any other failure
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")

        try:
            response = self._retrying(self._send, method, url, params=params, json=json_body)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request to {endpoint} timed out after {self.timeout}s: {e}")
            raise ApiError(
                f"Request timeout after {self.timeout}s",
                details={"endpoint": endpoint, "timeout": self.timeout}
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise ApiError(
                f"Failed to connect to backend: {str(e)}",
                details={"endpoint": endpoint, "error": str(e)}
            )

        payload = self._parse_body(response)

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed. Please log in again.",
                status_code=401,
                details={"endpoint": endpoint}
            )

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get("message")
            message = message or f"Request failed: {response.reason}"
            logger.error(f"{method} {endpoint} returned {response.status_code}: {message}")
            raise ApiError(
                message,
                status_code=response.status_code,
                details={"endpoint": endpoint}
            )

        if isinstance(payload, dict) and payload.get("data") is not None:
            return payload["data"]
        return payload

    @staticmethod
    def parse_model(model: Type[ModelT], data: Any, endpoint: str) -> ModelT:
        """
        Validate backend data against a schema.

        Raises:
            ApiError: If the backend sent data the schema rejects
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Invalid {model.__name__} from {endpoint}: {e.error_count()} errors")
            raise ApiError(
                f"Backend returned invalid {model.__name__} data",
                details={"endpoint": endpoint, "errors": [err["msg"] for err in e.errors()]}
            )

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, json_body: Optional[Any] = None) -> Any:
        return self.request("POST", endpoint, json_body=json_body)

    def put(self, endpoint: str, json_body: Optional[Any] = None) -> Any:
        return self.request("PUT", endpoint, json_body=json_body)
