from qarz_portal.core.config import settings, Settings
from qarz_portal.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
    is_valid_password,
)
