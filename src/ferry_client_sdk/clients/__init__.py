from .auth import AuthClient
from .chat_client import ChatClient
from .ferry_crew_client import FerryCrewClient
from .finance_client import FinanceClient
from .inventory_client import InventoryClient
from .passenger_client import PassengerClient
from .supplier_client import SupplierClient

__all__ = [
    "AuthClient",
    "ChatClient",
    "FerryCrewClient",
    "FinanceClient",
    "InventoryClient",
    "PassengerClient",
    "SupplierClient",
]
