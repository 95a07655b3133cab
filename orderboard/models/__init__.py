from orderboard.models.customer import Customer
from orderboard.models.order import Order, OrderStatus, PaymentMethod
