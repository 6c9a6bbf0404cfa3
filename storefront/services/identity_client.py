# storefront/services/identity_client.py
import requests
from requests import RequestException

from storefront.domain.errors import TransientIOError
from storefront.domain.identity import UserContext
from storefront.utils.retry import http_retry
from storefront.utils.settings import IDENTITY_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class IdentityClient:
    """
    Zamienia bearer token na tozsamosc wolajacego przez identity service.

    Brak tokenu albo token odrzucony przez serwis = anonim;
    bledem jest tylko niedostepny serwis.
    """

    def __init__(self, base_url: str | None = None, timeout: int = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or IDENTITY_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _fetch_me(self, token: str) -> requests.Response:
        url = f"{self.base_url}/me"
        logger.info(f"IdentityClient GET {url}")

        resp = requests.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        # 5xx ponawiamy, 401/403 to po prostu anonim
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp

    def resolve(self, token: str | None) -> UserContext:
        if not token:
            return UserContext.anonymous()

        try:
            resp = self._fetch_me(token)
        except RequestException as e:
            logger.error(f"Identity service unavailable: {e}")
            raise TransientIOError("Identity service unavailable") from e

        if resp.status_code in (401, 403, 404):
            return UserContext.anonymous()

        resp.raise_for_status()
        data = resp.json()
        return UserContext(user_id=int(data["id"]), is_admin=bool(data.get("is_admin", False)))
