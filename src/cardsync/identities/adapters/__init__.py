"""Infrastructure adapters for identity assignment.

These adapters implement the port interfaces defined in the domain layer,
connecting the application to external systems like the CSV file, the
tenant OAuth2 endpoints and the identity API.
"""

from .csv_loader import CsvInputLoader
from .identity_assigner import ApiIdentityAssigner
from .report_writer import TableReportWriter
from .session_provider import ApiAuthProvider

__all__ = [
    "CsvInputLoader",
    "ApiAuthProvider",
    "ApiIdentityAssigner",
    "TableReportWriter",
]
