from idserver.models.grant import AuthGrant
from idserver.models.passport import Passport
from idserver.models.token import AuthToken

__all__ = [
    "AuthGrant",
    "AuthToken",
    "Passport",
]
