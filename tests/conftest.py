"""Shared fixtures: an RSA key pair and a stub ActiveSG site."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qs

import httpx
import pytest
from Crypto.PublicKey import RSA

from dataminer.config import SiteDetails
from dataminer.models import Credentials

SITE = SiteDetails()

TIMESLOT_PAGE = """
<html><body>
<form>
  <div class="chkbox-grid">
    <input type="checkbox" id="slot1"><label for="slot1">07:00 AM</label>
    <label>25 Left</label>
  </div>
  <div class="chkbox-grid">
    <label>09:00 PM</label>
    <label>3 Left</label>
  </div>
</form>
</body></html>
"""


def login_page(public_key_pem: str | None, csrf_token: str | None = "csrf-123") -> str:
    fields = []
    if csrf_token is not None:
        fields.append(f'<input type="hidden" name="_csrf" value="{csrf_token}">')
    if public_key_pem is not None:
        fields.append(
            f'<input type="hidden" name="rsapublickey" value="{public_key_pem}">'
        )
    return (
        "<html><body><form action='/auth/signin' method='post'>"
        + "".join(fields)
        + "<input name='email'><input name='ecpassword'></form></body></html>"
    )


@pytest.fixture(scope="session")
def rsa_key_pair() -> RSA.RsaKey:
    return RSA.generate(2048)


@pytest.fixture(scope="session")
def public_key_pem(rsa_key_pair: RSA.RsaKey) -> str:
    return rsa_key_pair.publickey().export_key().decode("ascii")


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(email="runner@example.com", raw_password="hunter2")


@dataclass
class StubSite:
    """Minimal ActiveSG stand-in served through httpx.MockTransport."""

    public_key_pem: str | None
    csrf_token: str | None = "csrf-123"
    accept_login: bool = True
    timeslot_page: str = TIMESLOT_PAGE
    requests: list[httpx.Request] = field(default_factory=list)
    sign_in_forms: list[dict[str, list[str]]] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method == "GET" and url == SITE.login_page_url:
            return httpx.Response(
                200,
                html=login_page(self.public_key_pem, self.csrf_token),
                headers={"Set-Cookie": "ASGSESSID=abc; Path=/"},
            )

        if request.method == "POST" and url == SITE.sign_in_url:
            self.sign_in_forms.append(parse_qs(request.content.decode()))
            location = SITE.profile_url if self.accept_login else SITE.login_page_url
            return httpx.Response(302, headers={"Location": location})

        if request.method == "GET" and url == SITE.profile_url:
            return httpx.Response(200, html="<html><body>Profile</body></html>")

        if request.method == "GET" and "/facilities/view/activity/" in url:
            return httpx.Response(200, html=self.timeslot_page)

        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def stub_site(public_key_pem: str) -> StubSite:
    return StubSite(public_key_pem=public_key_pem)
