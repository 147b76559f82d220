"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

import pytest

from mdb_docs.exceptions import (
    ConfigurationError,
    DocsEngineError,
    DocumentModificationAccessError,
    InitializationError,
    InvalidArgumentError,
    PersistenceError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error_class",
        [
            InitializationError,
            ConfigurationError,
            InvalidArgumentError,
            DocumentModificationAccessError,
            PersistenceError,
        ],
    )
    def test_subclasses_are_docs_engine_errors(self, error_class):
        error = error_class("failed")
        assert isinstance(error, DocsEngineError)
        assert isinstance(error, RuntimeError)

    def test_invalid_argument_is_value_error(self):
        """Callers catching ValueError still see malformed input."""
        assert isinstance(InvalidArgumentError("bad"), ValueError)


class TestExceptionMessages:
    def test_message_without_context(self):
        error = DocsEngineError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.context == {}

    def test_message_with_context(self):
        error = DocsEngineError("Something went wrong", context={"collection": "roles"})
        assert "context:" in str(error)
        assert "collection=roles" in str(error)

    def test_access_error_carries_target(self):
        error = DocumentModificationAccessError(
            "denied", document_id="abc", principal=7, capability="edit"
        )
        assert error.document_id == "abc"
        assert error.principal == 7
        assert error.capability == "edit"
        assert error.context == {"document_id": "abc", "principal": 7, "capability": "edit"}

    def test_persistence_error_carries_operation(self):
        error = PersistenceError("boom", operation="insert", collection="projects")
        assert error.operation == "insert"
        assert error.collection == "projects"
        assert "operation=insert" in str(error)

    def test_invalid_argument_keeps_zero_value(self):
        error = InvalidArgumentError("bad page", argument="page", value=0)
        assert error.context == {"argument": "page", "value": 0}

    def test_initialization_error_context(self):
        error = InitializationError(
            "Connection failed", mongo_uri="mongodb://localhost:27017", db_name="docs"
        )
        assert error.mongo_uri == "mongodb://localhost:27017"
        assert error.db_name == "docs"
        assert "db_name=docs" in str(error)
