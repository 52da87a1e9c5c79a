from .invoice import Invoice, InvoiceItem
from .sale import PaymentMethod, Sale, SaleItem
