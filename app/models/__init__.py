from .payment import Payment
from .user import User
