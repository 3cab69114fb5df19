"""Digital Bank API client.

A thin wrapper around the REST API for scripts and integrations.  It
uses the ``requests`` library internally and exposes one method per
operation:

* :meth:`login` – obtain a token and remember it for later calls.
* :meth:`list_accounts` – one page of accounts.
* :meth:`get_balance` – balance lookup by account number.
* :meth:`create_account` – open an account.
* :meth:`deposit`, :meth:`payment`, :meth:`transfer` – move money.

Every method returns a tuple ``(data, error)``.  On success ``error`` is
``None``; on failure ``data`` is ``None`` and ``error`` is a dictionary
with ``status_code``, ``code`` and ``message`` taken from the API's
error body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class DigitalBankClient:
    """Client for the Digital Bank API (version 1)."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.  The
                ``/api/v1`` prefix is added by the client.
            token: Optional bearer token.  :meth:`login` sets it.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + "/api/v1"
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "code": None, "message": str(exc)}

        if response.ok:
            return (response.json() if response.content else None), None

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error = {
            "status_code": response.status_code,
            "code": body.get("code"),
            "message": body.get("message") or response.text or response.reason,
        }
        logger.error("API request failed (%s): %s", error["status_code"], error["message"])
        return None, error

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> Result:
        """Log in and keep the returned token for subsequent requests."""
        data, error = self._request("POST", "/login", json_body={"email": email, "password": password})
        if data:
            self.token = data.get("token")
        return data, error

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------
    def list_accounts(
        self,
        page_number: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Result:
        params: Dict[str, Any] = {"page_number": page_number}
        if page_size:
            params["page_size"] = page_size
        if search:
            params["search"] = search
        if sort:
            params["sort"] = sort
        return self._request("GET", "/accounts", params=params)

    def get_balance(self, account_number: str) -> Result:
        return self._request("GET", f"/accounts/{account_number}")

    def create_account(
        self, name: str, account_number: str, bank: str, deposit: float, password: str
    ) -> Result:
        payload = {
            "name": name,
            "accountNumber": account_number,
            "bank": bank,
            "deposit": deposit,
            "password": password,
            "password_confirm": password,
        }
        return self._request("POST", "/accounts", json_body=payload)

    def deposit(self, account_id: int, amount: float) -> Result:
        return self._request("PUT", f"/accounts/{account_id}/deposit", json_body={"amount": amount})

    def payment(self, account_id: int, amount: float, bank: str, title: str, password: str) -> Result:
        payload = {"bank": bank, "amount": amount, "title": title, "password": password}
        return self._request("POST", f"/accounts/{account_id}/payment", json_body=payload)

    def transfer(self, source_id: int, target_id: int, amount: float, bank: str, password: str) -> Result:
        payload = {"bank": bank, "amount": amount, "password": password}
        return self._request("POST", f"/accounts/{source_id}/{target_id}/transfer", json_body=payload)
