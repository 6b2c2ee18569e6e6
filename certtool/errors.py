class CertToolError(Exception):
    """Base class for every error raised by the certificate tool."""


class UploadRejected(CertToolError):
    """File is too large or of a type we cannot process."""


class CredentialMissing(CertToolError):
    pass


class OperationInProgress(CertToolError):
    """A batch or an export is already running."""


class NoTextExtracted(CertToolError):
    pass


class UnsupportedFileType(CertToolError):
    pass


class ExtractionError(CertToolError):
    """The model call failed or returned something we could not use."""


class TransientServiceError(ExtractionError):
    """Server-side or network failure; worth another attempt."""


class InvalidCredential(ExtractionError):
    pass


class ExtractionParseError(ExtractionError):
    pass


class SchemaError(ExtractionError):
    def __init__(self, message: str, raw_excerpt: str = ""):
        super().__init__(message)
        self.raw_excerpt = raw_excerpt
