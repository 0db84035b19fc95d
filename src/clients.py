"""
REST API client for the Compute Engine v1 API.
"""

import logging
import time
from typing import Dict, Iterator, Optional

import google.auth
from google.auth.transport.requests import AuthorizedSession

logger = logging.getLogger(__name__)

API_BASE = "https://compute.googleapis.com/compute/v1"


class ComputeRestClient:
    """REST transport for Compute Engine: auth, retry and pagination."""

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        timeout_s: int = 60,
        max_retries: int = 5,
        base_delay: float = 2.0,
    ):
        """
        Initialize the Compute Engine REST client.

        Args:
            timeout_s: Request timeout in seconds
            max_retries: Maximum number of retries for transient errors
            base_delay: Base delay for exponential backoff
        """
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.base_delay = base_delay

        creds, _ = google.auth.default(
            scopes=["https://www.googleapis.com/auth/compute"]
        )
        self.session = AuthorizedSession(creds)

    def _url(self, path: str) -> str:
        """Construct full API URL from path."""
        if path.startswith("https://"):
            return path
        return f"{API_BASE}/{path.lstrip('/')}"

    def _request_with_retry(self, method: str, url: str, **kwargs) -> dict:
        """
        Execute HTTP request with exponential backoff retry for transient errors.

        Args:
            method: HTTP method (GET, POST, DELETE)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            Dictionary with 'response' and 'status_code' keys

        Raises:
            RuntimeError: If max retries exceeded
        """
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                if method.upper() == "GET":
                    resp = self.session.get(url, timeout=self.timeout_s, **kwargs)
                elif method.upper() == "POST":
                    resp = self.session.post(url, timeout=self.timeout_s, **kwargs)
                elif method.upper() == "DELETE":
                    resp = self.session.delete(url, timeout=self.timeout_s, **kwargs)
                else:
                    raise ValueError(f"Unsupported method: {method}")

                if resp.status_code in self.RETRYABLE_STATUS_CODES:
                    delay = self._calculate_delay(attempt, resp)
                    error_info = ""
                    try:
                        error_data = resp.json()
                        error_info = error_data.get("error", {}).get("message", "")
                    except ValueError:
                        pass
                    logger.warning(
                        f"Retryable error {resp.status_code} ({error_info}), attempt {attempt + 1}/{self.max_retries + 1}, waiting {delay:.1f}s..."
                    )
                    last_error = (
                        f"HTTP {resp.status_code}: {error_info or resp.text[:200]}"
                    )
                    time.sleep(delay)
                    continue

                return {"response": resp, "status_code": resp.status_code}

            except ValueError:
                raise
            except Exception as e:
                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Request error: {e}, attempt {attempt + 1}/{self.max_retries + 1}, waiting {delay:.1f}s..."
                )
                last_error = str(e)
                time.sleep(delay)

        raise RuntimeError(f"Max retries exceeded. Last error: {last_error}")

    def _calculate_delay(self, attempt: int, resp=None) -> float:
        """
        Calculate delay with exponential backoff and jitter.

        Args:
            attempt: Current attempt number
            resp: Optional response object (to check Retry-After header)

        Returns:
            Delay in seconds
        """
        if resp is not None and "Retry-After" in resp.headers:
            try:
                return float(resp.headers["Retry-After"])
            except ValueError:
                pass

        delay = self.base_delay * (2**attempt)
        jitter = delay * 0.2 * (0.5 - time.time() % 1)
        return min(delay + jitter, 180.0)

    def get(self, path: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """
        GET a single resource.

        Args:
            path: Resource path relative to the API base, or a full self link
            params: Optional query parameters

        Returns:
            Resource as dictionary, or None if it does not exist

        Raises:
            RuntimeError: If API call fails
        """
        result = self._request_with_retry("GET", self._url(path), params=params or {})
        resp = result["response"]
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise RuntimeError(f"GET {path} failed ({resp.status_code}): {resp.text}")
        return resp.json()

    def post(
        self, path: str, body: Optional[Dict] = None, params: Optional[Dict] = None
    ) -> Dict:
        """
        POST to a collection or custom method.

        Args:
            path: Resource path relative to the API base
            body: JSON request body
            params: Optional query parameters

        Returns:
            Response body (an operation resource for mutating calls)

        Raises:
            RuntimeError: If API call fails
        """
        result = self._request_with_retry(
            "POST", self._url(path), json=body or {}, params=params or {}
        )
        resp = result["response"]
        if resp.status_code not in (200, 202):
            raise RuntimeError(f"POST {path} failed ({resp.status_code}): {resp.text}")
        data = resp.json()
        if "name" not in data:
            raise RuntimeError(f"POST {path} returned unexpected response: {data}")
        return data

    def delete(self, path: str) -> Optional[Dict]:
        """
        DELETE a resource.

        Args:
            path: Resource path relative to the API base

        Returns:
            Operation resource, or None if the resource was already gone

        Raises:
            RuntimeError: If API call fails
        """
        result = self._request_with_retry("DELETE", self._url(path))
        resp = result["response"]
        if resp.status_code == 404:
            return None
        if resp.status_code not in (200, 202):
            raise RuntimeError(
                f"DELETE {path} failed ({resp.status_code}): {resp.text}"
            )
        return resp.json()

    def list_pages(self, path: str) -> Iterator[Dict]:
        """
        Iterate over all items of a paginated collection.

        Args:
            path: Collection path relative to the API base

        Yields:
            Each item dictionary across all pages

        Raises:
            RuntimeError: If API call fails
        """
        url = self._url(path)
        page_token: Optional[str] = None

        while True:
            params = {}
            if page_token:
                params["pageToken"] = page_token

            result = self._request_with_retry("GET", url, params=params)
            resp = result["response"]
            if resp.status_code == 404:
                return
            if resp.status_code != 200:
                raise RuntimeError(
                    f"List {path} failed ({resp.status_code}): {resp.text}"
                )

            data = resp.json()
            for item in data.get("items", []):
                yield item

            page_token = data.get("nextPageToken")
            if not page_token:
                break
