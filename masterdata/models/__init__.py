from .customer import Customer
from .radiator import Radiator
from .warehouse import Warehouse
