from __future__ import annotations


class NodeOperationError(RuntimeError):
    """
    Configuration problem for a single item: unknown resource/operation,
    missing parameter, missing file name for an upload and so on.
    """

    def __init__(self, message: str, *, item_index: int | None = None, description: str | None = None):
        super().__init__(message)
        self.message = message
        self.item_index = item_index
        self.description = description
