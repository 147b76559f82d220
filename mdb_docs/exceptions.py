"""
Custom exceptions for MDB_DOCS.

The taxonomy mirrors what callers translate into user-facing responses:
absence of a document is never an exception (repositories return ``None``),
``DocumentModificationAccessError`` is a failed RLS capability check,
``InvalidArgumentError`` is malformed pagination or scope input and
``PersistenceError`` wraps any backend failure.
"""

from typing import Any, Dict, Optional


class DocsEngineError(RuntimeError):
    """
    Base exception for MDB_DOCS errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection,
                 operation, document_id, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class InitializationError(DocsEngineError):
    """
    Raised when the MongoDB connection cannot be established.

    Attributes:
        mongo_uri: MongoDB connection URI (if available)
        db_name: Database name (if available)
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.db_name = db_name


class ConfigurationError(DocsEngineError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class InvalidArgumentError(DocsEngineError, ValueError):
    """
    Raised for malformed pagination or scope input (negative offset,
    page below 1, unknown status value, ...).

    Attributes:
        argument: Name of the offending argument
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if argument:
            context["argument"] = argument
        if value is not None:
            context["value"] = value
        super().__init__(message, context=context)
        self.argument = argument
        self.value = value


class DocumentModificationAccessError(DocsEngineError):
    """
    Raised when the acting principal's RLS record is missing or does not
    grant the capability an operation needs.

    Attributes:
        document_id: Target document id
        principal: Acting principal id
        capability: The capability that was required ("edit", "delete", ...)
    """

    def __init__(
        self,
        message: str,
        document_id: Optional[str] = None,
        principal: Optional[Any] = None,
        capability: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if document_id:
            context["document_id"] = document_id
        if principal is not None:
            context["principal"] = principal
        if capability:
            context["capability"] = capability
        super().__init__(message, context=context)
        self.document_id = document_id
        self.principal = principal
        self.capability = capability


class PersistenceError(DocsEngineError):
    """
    Raised when the backing store fails. Writes that raise this error were
    rolled back by the surrounding transaction.

    Attributes:
        operation: Repository operation that failed ("insert", "count", ...)
        collection: Collection the operation targeted
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection:
            context["collection"] = collection
        super().__init__(message, context=context)
        self.operation = operation
        self.collection = collection
