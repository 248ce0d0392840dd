"""
Fatal ingestion errors.

Row-level defects never raise; only structurally broken input does.
"""


class IngestError(ValueError):
    """Base class for conditions that abort a whole ingestion."""


class EmptyInput(IngestError):
    def __init__(self, message: str = "Received empty data or not enough rows"):
        super().__init__(message)


class MissingRequiredColumns(IngestError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            f"Could not find required columns ({', '.join(self.missing)}) in the CSV data"
        )


class NoValidRows(IngestError):
    def __init__(self, message: str = "No valid data rows found in the CSV"):
        super().__init__(message)
