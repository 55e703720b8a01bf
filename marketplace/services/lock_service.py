import redis
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec nie zwolnimy locka ktory po wygasnieciu TTL przejal inny checkout

class LockService:
    """
    -blokada checkoutu per uzytkownik (podwojne wyslanie tego samego koszyka)
    -zwalnianie locka tylko przez wlasciciela (token)
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def checkout_key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self.checkout_key(user_id)
        logger.info(f"Acquire lock {key} token {token}")
        #SET checkout:1:lock "<token>" NX EX 60
        return bool(self.redis.set(
            name=key,
            value=token,
            nx=True, #jak klucz istnieje to nic nie rob i zwroc None
            ex=ttl, #wygasa sam, nawet jak proces padnie w trakcie checkoutu
        ))

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self.checkout_key(user_id)
        logger.info(f"Release lock {key} token {token}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
