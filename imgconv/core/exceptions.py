from typing import Dict, List, Optional, TypedDict, Union


class ConversionDetails(TypedDict, total=False):
    """Type-safe details for decode/encode errors."""

    input_path: str
    output_path: str
    input_format: str
    output_format: str
    dimensions: tuple[int, int]
    quality: int
    reason: str


class ValidationDetails(TypedDict, total=False):
    """Type-safe details for validation errors."""

    field_name: str
    field_value: Union[str, int, float, bool]
    expected_values: List[str]
    constraints: str


class FormatDetails(TypedDict, total=False):
    """Type-safe details for format errors."""

    requested_format: str
    supported_formats: List[str]
    file_extension: str


class FileDetails(TypedDict, total=False):
    """Type-safe details for filesystem errors."""

    path: str
    operation: str
    reason: str


class ConfigDetails(TypedDict, total=False):
    """Type-safe details for configuration errors."""

    config_key: str
    valid_options: List[str]
    missing: List[str]


ErrorDetails = Union[
    ConversionDetails,
    ValidationDetails,
    FormatDetails,
    FileDetails,
    ConfigDetails,
    Dict[str, Union[str, int, float, bool, List[str]]],
]


class ImageConverterError(Exception):
    """Base exception for all imgconv errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[ErrorDetails] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(ImageConverterError):
    """Raised when arguments fail validation before any file is touched."""

    def __init__(self, message: str, details: Optional[ValidationDetails] = None):
        super().__init__(message=message, error_code="CONV002", details=details)


class ConfigurationError(ImageConverterError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, details: Optional[ConfigDetails] = None):
        super().__init__(message=message, error_code="CONV007", details=details)


class UnsupportedFormatError(ImageConverterError):
    """Raised when an extension or format name is not one of the supported formats."""

    def __init__(self, message: str, details: Optional[FormatDetails] = None):
        super().__init__(message=message, error_code="CONV102", details=details)
        self.requested_format = (details or {}).get("requested_format", "")


class DecodeError(ImageConverterError):
    """Raised when input bytes cannot be decoded into an image."""

    def __init__(self, message: str, details: Optional[ConversionDetails] = None):
        super().__init__(message=message, error_code="CONV201", details=details)


class EncodeError(ImageConverterError):
    """Raised when encoding or writing the output fails."""

    def __init__(self, message: str, details: Optional[ConversionDetails] = None):
        super().__init__(message=message, error_code="CONV202", details=details)


class FileIOError(ImageConverterError):
    """Raised when a file or directory is missing or not accessible."""

    def __init__(
        self,
        message: str,
        details: Optional[FileDetails] = None,
        error_code: str = "CONV301",
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class DirectoryError(FileIOError):
    """Raised when a batch run cannot read its input or create its output directory.

    This is the only error that aborts a whole batch run.
    """

    def __init__(self, message: str, details: Optional[FileDetails] = None):
        super().__init__(message=message, details=details, error_code="CONV302")
