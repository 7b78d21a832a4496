# Models package
from app.models.user import User, UserRole
from app.models.box import Box, BoxStatus
from app.models.category import Category
from app.models.product import Product
from app.models.customer import Customer
from app.models.order import Order, OrderLine, OrderStatus
from app.models.payment import Payment
