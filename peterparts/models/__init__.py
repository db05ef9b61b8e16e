from peterparts.models.product import Brand, Product
from peterparts.models.user import AuthProvider, Role, User
from peterparts.models.verification_code import VerificationCode

__all__ = [
    "AuthProvider",
    "Brand",
    "Product",
    "Role",
    "User",
    "VerificationCode",
]
