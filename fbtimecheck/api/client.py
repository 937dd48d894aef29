"""
FreshBooksClient: A client for the FreshBooks OAuth and time tracking APIs.
"""
import requests
from typing import Optional, Dict, Any, List, Union
from datetime import date

from ..config import Config, Credentials
from ..exceptions import AuthenticationError, FreshBooksAPIError, TokenExpiredError
from ..models import TeamMember

UNAUTHORIZED_MESSAGE = "The server could not verify that you are authorized"
DEFAULT_TIMEOUT = 30


class FreshBooksClient:
    """A client for interacting with the FreshBooks API.

    Requests are issued one at a time. Token operations never modify the
    client; they return new Credentials which the caller assigns back to
    ``client.credentials`` once persisted.
    """

    def __init__(self, config: Config, credentials: Optional[Credentials] = None):
        """Initialize the FreshBooksClient.

        Args:
            config: Application configuration
            credentials: Token pair to use (optional, defaults to config.credentials)
        """
        self.config = config
        self.credentials = credentials if credentials is not None else config.credentials
        self.base_url = config.base_url
        self.timeout = DEFAULT_TIMEOUT

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/auth/oauth/token"

    def authorization_url(self) -> str:
        """Get the URL where the user grants access and receives a code."""
        req = requests.Request(
            "GET",
            f"{self.base_url}/oauth/authorize",
            params={
                "client_id": self.config.client_id,
                "response_type": "code",
                "redirect_uri": self.config.redirect_uri,
            },
        )
        return req.prepare().url

    def api_get(self, url: str, params: Optional[dict] = None) -> Any:
        """Make an authorized GET request to the FreshBooks API.

        Args:
            url: API endpoint URL
            params: Query parameters (optional)

        Returns:
            API response as JSON

        Raises:
            TokenExpiredError: If no token is set or the API answers 401
            FreshBooksAPIError: If the request fails for any other reason
        """
        if not self.credentials.has_access_token:
            raise TokenExpiredError("Access token is required")

        headers = {
            "Authorization": f"Bearer {self.credentials.access_token}",
            "Content-Type": "application/json",
        }
        try:
            resp = requests.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FreshBooksAPIError(f"API request failed: {e}")

        if resp.status_code == 401:
            raise TokenExpiredError()

        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and UNAUTHORIZED_MESSAGE in str(data.get("message") or ""):
            raise TokenExpiredError(
                "You are not allowed to access this resource, ensure you have a valid token."
            )

        if not resp.ok:
            detail = data.get("message") if isinstance(data, dict) and data.get("message") else resp.reason
            raise FreshBooksAPIError(f"API request failed ({resp.status_code}): {detail}", resp.status_code)

        if data is None:
            raise FreshBooksAPIError(f"API returned invalid JSON for {url}", resp.status_code)
        return data

    def _token_request(self, payload: Dict[str, str], failure_message: str) -> Credentials:
        """POST a form-encoded grant to the token endpoint.

        Returns:
            New Credentials built from the response

        Raises:
            AuthenticationError: If the grant is rejected
        """
        payload = dict(payload, client_id=self.config.client_id, client_secret=self.config.client_secret)
        try:
            resp = requests.post(
                self.token_url,
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"{failure_message}: {e}")

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if not resp.ok or data.get("error") or not data.get("access_token"):
            detail = data.get("error_description") or data.get("error")
            raise AuthenticationError(f"{failure_message}: {detail}" if detail else failure_message)

        return self.credentials.with_tokens(data["access_token"], data.get("refresh_token"))

    def generate_access_token(self, code: str) -> Credentials:
        """Exchange an authorization code for a token pair.

        Args:
            code: Authorization code from the OAuth redirect

        Returns:
            New Credentials
        """
        if not code or not code.strip():
            raise AuthenticationError("Authorization code is required")
        return self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code.strip(),
                "redirect_uri": self.config.redirect_uri,
            },
            "Code expired or is not valid",
        )

    def refresh_access_token(self) -> Credentials:
        """Exchange the current refresh token for a new token pair.

        Returns:
            New Credentials (the old refresh token is kept if none is returned)
        """
        if not self.credentials.refresh_token:
            raise AuthenticationError("No refresh token available")
        return self._token_request(
            {
                "grant_type": "refresh_token",
                "refresh_token": self.credentials.refresh_token,
            },
            "Failed to refresh token",
        )

    def fetch_team_members(self) -> List[TeamMember]:
        """Get all active team members of the business, following pages.

        Returns:
            List of team members
        """
        url = f"{self.base_url}/auth/api/v1/businesses/{self.config.business_id}/team_members"
        members = []
        page = 1
        while True:
            data = self.api_get(url, {"active": "true", "page": page})
            users = data.get("response") if isinstance(data, dict) else None
            if not isinstance(users, list):
                raise FreshBooksAPIError("No team members found in API response")
            members.extend(TeamMember.from_api(u) for u in users)

            meta = data.get("meta") or {}
            pages = int(meta.get("pages") or 1)
            if page >= pages:
                break
            page += 1
        return members

    def fetch_time_entries(self, identity_id: str, start_date: Union[str, date],
                           end_date: Union[str, date]) -> Dict[str, Any]:
        """Get time entries of one team member for a date range.

        Args:
            identity_id: Identity ID of the team member
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            Response with 'time_entries' and 'meta' -> 'total_logged' (seconds)
        """
        from ..utils.date_utils import iso_datetime

        url = f"{self.base_url}/timetracking/business/{self.config.business_id}/time_entries"
        params = {
            "started_from": iso_datetime(start_date),
            "started_to": iso_datetime(end_date, is_end=True),
            "team": "true",
            "identity_id": identity_id,
        }
        data = self.api_get(url, params)
        if not isinstance(data, dict):
            raise FreshBooksAPIError("Unexpected time entries response")
        if not isinstance(data.get("time_entries"), list):
            data["time_entries"] = []
        if not isinstance(data.get("meta"), dict):
            data["meta"] = {}
        data["meta"].setdefault("total_logged", 0)
        return data
