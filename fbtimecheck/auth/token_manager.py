"""TokenManager: acquire, refresh and persist FreshBooks OAuth tokens."""
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from dotenv import set_key

from ..api.client import FreshBooksClient
from ..config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, Credentials
from ..exceptions import AuthenticationError, FreshBooksError


class CodeProvider(ABC):
    """Source of OAuth authorization codes."""

    @abstractmethod
    def get_code(self) -> str:
        """Return an authorization code."""


class ConsoleCodeProvider(CodeProvider):
    """Ask the user to paste the authorization code."""

    def __init__(self, prompt: str = "Please enter the authorization code: "):
        self.prompt = prompt

    def get_code(self) -> str:
        return input(self.prompt).strip()


class StaticCodeProvider(CodeProvider):
    """Always return the same code."""

    def __init__(self, code: str):
        self.code = code

    def get_code(self) -> str:
        return self.code


class TokenManager:
    """Keeps the client's token pair usable and stored in the env file."""

    def __init__(self, client: FreshBooksClient, env_path: str,
                 code_provider: Optional[CodeProvider] = None):
        """Initialize a TokenManager.

        Args:
            client: FreshBooks API client whose credentials are managed
            env_path: Env file the tokens are written to
            code_provider: Source of authorization codes (optional, defaults to console input)
        """
        self.client = client
        self.env_path = env_path
        self.code_provider = code_provider or ConsoleCodeProvider()

    def has_valid_token(self) -> bool:
        """Check whether an access token is present.

        The token is not validated against the API; an expired token is only
        detected when a request is answered with 401.
        """
        return self.client.credentials.has_access_token

    def generate_and_save_token(self) -> Credentials:
        """Ask for an authorization code, exchange it and persist the tokens.

        Returns:
            The new credentials
        """
        print(f"🔗 Authorize access at: {self.client.authorization_url()}")
        code = self.code_provider.get_code()

        print("\n🔄 Generating access token...")
        credentials = self.client.generate_access_token(code)
        print("✅ Access token generated")

        self.save_credentials(credentials)
        print(f"✅ Access token updated in {os.path.basename(self.env_path)} file")
        return credentials

    def refresh_and_save_token(self) -> Credentials:
        """Use the refresh token to get a new token pair and persist it."""
        print("🔄 Refreshing access token...")
        credentials = self.client.refresh_access_token()
        self.save_credentials(credentials)
        print("✅ Access token refreshed")
        return credentials

    def handle_expired_token(self) -> Credentials:
        """Recover from a 401: refresh first, then fall back to a new authorization code.

        Raises:
            FreshBooksError: If neither refresh nor re-authorization succeeds
        """
        if self.client.credentials.refresh_token:
            try:
                return self.refresh_and_save_token()
            except FreshBooksError as e:
                print(f"⚠️  Token refresh failed ({e}), requesting new authorization...")
        else:
            print("⚠️  No refresh token available, requesting new authorization...")
        return self.generate_and_save_token()

    def save_credentials(self, credentials: Credentials) -> None:
        """Write the tokens to the env file and hand them to the client.

        Existing FRESHBOOKS_ACCESS_TOKEN / FRESHBOOKS_REFRESH_TOKEN lines are
        replaced, missing ones are appended.
        """
        try:
            Path(self.env_path).touch(exist_ok=True)
            set_key(self.env_path, ACCESS_TOKEN_KEY, credentials.access_token, quote_mode="never")
            if credentials.refresh_token:
                set_key(self.env_path, REFRESH_TOKEN_KEY, credentials.refresh_token, quote_mode="never")
        except OSError as e:
            raise AuthenticationError(f"Failed to update {self.env_path}: {e}")
        self.client.credentials = credentials
