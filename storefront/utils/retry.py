# storefront/utils/retry.py
import functools

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
import requests
import redis

from storefront.domain.errors import TransientIOError


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def _rollback_session(retry_state):
    #sesja po bledzie musi dostac rollback zanim zrobi kolejne zapytanie
    owner = retry_state.args[0] if retry_state.args else None
    db = getattr(owner, "db", None)
    if db is not None:
        db.rollback()


# tylko dla odczytow - zapisy checkoutu nigdy nie sa powtarzane
def db_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type((OperationalError, PoolTimeoutError)),
        before_sleep=_rollback_session,
    )


def store_read(fn):
    """Ponawia metode tylko do odczytu; po wyczerpaniu prob TransientIOError."""
    retrying = db_retry()(fn)

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return retrying(*args, **kwargs)
        except (OperationalError, PoolTimeoutError) as e:
            raise TransientIOError("Store unavailable, please try again") from e

    return wrapper
