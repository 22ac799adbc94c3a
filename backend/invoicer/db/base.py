from backend.invoicer.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all
from backend.invoicer.models.invoice import Invoice  # noqa: F401
from backend.invoicer.models.line_item import LineItem  # noqa: F401
