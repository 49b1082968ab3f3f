# report_engine/core/exceptions.py
"""Domain exceptions raised by the compilers, the importer and the metadata client."""

from typing import Optional


class ReportEngineError(Exception):
    """Base class for every error raised by the report engine."""


class UnknownReportTypeError(ReportEngineError):
    """No compiler is registered for the requested report type."""

    def __init__(self, report_type: object):
        self.report_type = report_type
        super().__init__(f"Unknown report type: {report_type}")


class LegacyReportError(ReportEngineError):
    """A legacy report payload cannot be converted."""


class MetadataServiceError(ReportEngineError):
    """The metadata service answered with an unexpected status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MetadataUnauthorizedError(MetadataServiceError):
    pass


class MetadataNotFoundError(MetadataServiceError):
    pass


class MetadataBadRequestError(MetadataServiceError):
    pass


class MetadataServerError(MetadataServiceError):
    pass
