"""
ActiveSG login: scrape the login form, RSA-encrypt the password and sign in.

The login page carries a CSRF token and an RSA public key in hidden inputs.
The password is encrypted with that key (PKCS#1 v1.5) and posted together
with the token. A successful sign-in redirects to the profile page; anything
else means the credentials were rejected or the session expired.
"""

from __future__ import annotations

import base64
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator

import httpx
from bs4 import BeautifulSoup
from Crypto.Cipher import PKCS1_v1_5
from Crypto.PublicKey import RSA

from dataminer.config import DataMinerConstants, SiteDetails
from dataminer.errors import (
    CantFindElement,
    DataMinerError,
    FailedToGenerateKeyFromPEM,
    FailedToParsePEM,
    InvalidCredentialsSessionExpired,
    NetworkError,
)
from dataminer.models import Credentials, EncryptedCredentials, LoginForm

logger = logging.getLogger(__name__)

site_details = SiteDetails()


# --- Login form parsing ---


def _as_soup(html: str | BeautifulSoup) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html, "html.parser")


def _extract_input_value(html: str | BeautifulSoup, name: str) -> str:
    soup = _as_soup(html)
    field = soup.select_one(f'input[name="{name}"]')

    if field is None or field.get("value") is None:
        raise CantFindElement(name)

    return field["value"]


def extract_rsa_public_key(html: str | BeautifulSoup) -> str:
    """
    Extract the PEM encoded RSA public key from the login page.

    Raises:
        CantFindElement: If the rsapublickey input or its value is missing
    """
    return _extract_input_value(html, "rsapublickey")


def extract_csrf_token(html: str | BeautifulSoup) -> str:
    """
    Extract the CSRF token from the login page.

    Raises:
        CantFindElement: If the _csrf input or its value is missing
    """
    return _extract_input_value(html, "_csrf")


def extract_login_form(html: str | BeautifulSoup) -> LoginForm:
    soup = _as_soup(html)
    return LoginForm(
        csrf_token=extract_csrf_token(soup),
        rsa_public_key_pem=extract_rsa_public_key(soup),
    )


def encrypt_password(public_key_pem: str, password: str) -> str:
    """
    Encrypt a password with the site's RSA public key.

    The password has to fit in a single RSA block, it is never chunked.

    Args:
        public_key_pem: PEM encoded RSA public key
        password: Plaintext password

    Returns:
        Base64 encoded ciphertext

    Raises:
        FailedToParsePEM: If the key cannot be parsed
        FailedToGenerateKeyFromPEM: If encryption with the key fails
    """
    try:
        public_key = RSA.import_key(public_key_pem)
    except (ValueError, IndexError, TypeError) as e:
        raise FailedToParsePEM() from e

    try:
        ciphertext = PKCS1_v1_5.new(public_key).encrypt(password.encode("utf-8"))
    except (ValueError, TypeError) as e:
        raise FailedToGenerateKeyFromPEM() from e

    return base64.b64encode(ciphertext).decode("ascii")


def encrypt_credentials(
    credentials: Credentials, login_form: LoginForm
) -> EncryptedCredentials:
    return EncryptedCredentials(
        email=credentials.email,
        encrypted_password_b64=encrypt_password(
            login_form.rsa_public_key_pem, credentials.raw_password
        ),
        csrf_token=login_form.csrf_token,
    )


# --- Session ---


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_LOGIN_PAGE = "awaiting_login_page"
    AWAITING_SIGN_IN_RESULT = "awaiting_sign_in_result"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass
class Session:
    """Authenticated client plus the landing page used as Referer."""

    client: httpx.AsyncClient
    referer_url: str


def create_http_client(
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create HTTP client with browser-like default headers and a cookie jar.

    Redirects are followed on every request.

    Args:
        transport: Optional transport, e.g. a stub in tests

    Returns:
        Configured HTTP client
    """
    client = httpx.AsyncClient(
        transport=transport,
        timeout=DataMinerConstants.DEFAULT_TIMEOUT,
        follow_redirects=True,
    )
    client.headers.update(
        {
            "User-Agent": DataMinerConstants.USER_AGENT,
            "Accept": DataMinerConstants.ACCEPT,
        }
    )
    return client


class SessionAuthenticator:
    """
    Runs the login sequence for a single client.

    An authenticator is used once: after FAILED the client must be discarded
    and a new one created for the next attempt.
    """

    def __init__(
        self, client: httpx.AsyncClient, site: SiteDetails = site_details
    ) -> None:
        self.client = client
        self.site = site
        self.state = AuthState.UNAUTHENTICATED

    async def fetch_login_form(self) -> LoginForm:
        self.state = AuthState.AWAITING_LOGIN_PAGE
        logger.info("Accessing login page...")

        response = await self.client.get(self.site.login_page_url)
        response.raise_for_status()

        login_form = extract_login_form(response.text)
        logger.info("GET login page successful!")
        logger.debug(f"Fetched CSRF token: {login_form.csrf_token[:10]}...")
        return login_form

    async def sign_in(self, encrypted: EncryptedCredentials) -> httpx.Response:
        self.state = AuthState.AWAITING_SIGN_IN_RESULT
        logger.info("Submitting email and encrypted password...")

        response = await self.client.post(
            self.site.sign_in_url,
            data=encrypted.to_form(),
            follow_redirects=True,
        )
        logger.info(f"Login submission to {response.url}, status: {response.status_code}")
        return response

    async def authenticate(self, credentials: Credentials) -> Session:
        """
        Perform the complete login flow.

        Args:
            credentials: User email and plaintext password

        Returns:
            Authenticated session with the profile page as referer

        Raises:
            NetworkError: If a request fails
            CantFindElement: If the login form is missing a field
            FailedToParsePEM: If the public key is malformed
            FailedToGenerateKeyFromPEM: If the password cannot be encrypted
            InvalidCredentialsSessionExpired: If sign-in does not reach the profile
        """
        if self.state is not AuthState.UNAUTHENTICATED:
            raise RuntimeError(f"Authenticator already used (state: {self.state.value})")

        try:
            login_form = await self.fetch_login_form()
            encrypted = encrypt_credentials(credentials, login_form)
            response = await self.sign_in(encrypted)
        except httpx.HTTPError as e:
            self.state = AuthState.FAILED
            logger.error(f"Authentication request failed: {e}")
            raise NetworkError(f"Authentication request failed: {e}") from e
        except DataMinerError:
            self.state = AuthState.FAILED
            raise

        landed_url = str(response.url)
        if landed_url != self.site.profile_url:
            self.state = AuthState.FAILED
            logger.warning(f"Sign-in landed on {landed_url}, expected profile page")
            raise InvalidCredentialsSessionExpired(landed_url)

        self.state = AuthState.AUTHENTICATED
        logger.info("Logged in successfully!")
        return Session(client=self.client, referer_url=landed_url)


@asynccontextmanager
async def authenticated_session(
    credentials: Credentials,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncGenerator[Session, None]:
    """
    Context manager for a freshly authenticated session.

    Every call creates its own client and logs in again; sessions are never
    shared or reused.

    Yields:
        Authenticated session

    Raises:
        DataMinerError: If authentication fails
    """
    client = create_http_client(transport)
    try:
        session = await SessionAuthenticator(client).authenticate(credentials)
        yield session
    finally:
        if not client.is_closed:
            await client.aclose()
