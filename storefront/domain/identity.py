# storefront/domain/identity.py
from dataclasses import dataclass

from storefront.domain.errors import AuthenticationRequiredError


@dataclass(frozen=True)
class UserContext:
    """Tozsamosc wolajacego, przekazywana jawnie do kazdego wywolania serwisu."""

    user_id: int | None = None
    is_admin: bool = False

    @classmethod
    def anonymous(cls) -> "UserContext":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    def require(self) -> int:
        if self.user_id is None:
            raise AuthenticationRequiredError()
        return self.user_id

    def require_admin(self) -> int:
        user_id = self.require()
        if not self.is_admin:
            raise PermissionError("Admin access required")
        return user_id
