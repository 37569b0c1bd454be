import logging
from types import SimpleNamespace

import pytest
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from notes_api.exceptions.base import DuplicateError, UnknownSortPropertyError
from notes_api.exceptions.classifier import ExceptionClassifier, first_validation_message
from notes_api.exceptions.errors import (
    GENERIC_ERROR_MESSAGE,
    TESTING_MARKER,
    EntityFamily,
    ErrorKind,
    NoteServiceError,
    PageRequestMissingError,
    ServiceError,
    UserServiceError,
    make_error,
)
from notes_api.models.user import EMAIL_UNIQUE_NAME, USERNAME_UNIQUE_NAME
from notes_api.schemas.user import CreateUserDTO
from notes_api.security.audit import NullAuditSink
from notes_api.tests.test_fixtures.service_fixtures import RecordingAuditSink


def pydantic_error(**data) -> ValidationError:
    try:
        CreateUserDTO(**data)
    except ValidationError as exc:
        return exc
    raise AssertionError("expected a validation error")


def pg_unique_violation(constraint: str) -> IntegrityError:
    orig = SimpleNamespace(sqlstate="23505", diag=SimpleNamespace(constraint_name=constraint))
    return IntegrityError("INSERT INTO users ...", params={}, orig=orig)


class TestValidationRule:

    def test_first_validation_message_is_used(self):
        """
        Behavior:
            - A DTO with several invalid fields yields the FIRST field's message.
            - Status is 400.
        """
        exc = pydantic_error(username="", email="nope", password="short")
        error = ExceptionClassifier().classify(exc, EntityFamily.USER)

        assert error.kind is ErrorKind.VALIDATION
        assert error.http_status() == 400
        assert error.message == "Username mustn't be blank"

    def test_request_validation_error(self):
        exc = RequestValidationError([{"loc": ("body", "email"), "msg": "Value error, Email is invalid", "type": "value_error"}])
        error = ExceptionClassifier().classify(exc, EntityFamily.USER)
        assert error.message == "Email is invalid"

    def test_validation_without_errors_falls_back_to_default_text(self):
        error = ExceptionClassifier().classify(RequestValidationError([]), EntityFamily.NOTE)
        assert error.http_status() == 400
        assert error.message == "Invalid request"

    def test_prefix_is_stripped(self):
        assert first_validation_message([{"msg": "Value error, bad"}]) == "bad"
        assert first_validation_message([]) is None


class TestServiceErrorPassThrough:

    def test_service_error_is_returned_unchanged(self):
        original = make_error(EntityFamily.NOTE, ErrorKind.NOTE_NOT_FOUND)
        assert ExceptionClassifier().classify(original, EntityFamily.NOTE) is original

    def test_status_and_message_are_preserved_across_families(self):
        original = make_error(EntityFamily.USER, ErrorKind.USER_NOT_FOUND)
        result = ExceptionClassifier().classify(original, EntityFamily.NOTE)
        assert result.http_status() == 404
        assert result.message == "User not found"


class TestPageRequestRule:

    def test_missing_page_request_maps_to_400_generic(self):
        error = ExceptionClassifier().classify(PageRequestMissingError("NoteService.get_page"), EntityFamily.NOTE)
        assert error.kind is ErrorKind.PAGE_REQUEST_MISSING
        assert error.http_status() == 400
        assert error.message == GENERIC_ERROR_MESSAGE

    def test_marker_match_is_case_insensitive(self):
        exc = TypeError('  cannot use "PAGE_REQUEST" IS NONE here ')
        assert ExceptionClassifier().classify(exc, EntityFamily.USER).http_status() == 400

    def test_other_type_errors_are_unexpected(self, audit_sink):
        error = ExceptionClassifier(audit_sink).classify(TypeError("unsupported operand"), EntityFamily.USER)
        assert error.http_status() == 500


class TestSortRule:

    @pytest.mark.parametrize(
        "prop, model, expected",
        [
            ("shoe_size", "User", "No property 'shoe_size' found"),
            ("color", "Note", "No property 'color' found"),
        ],
    )
    def test_message_is_cut_before_for_type(self, prop, model, expected):
        error = ExceptionClassifier().classify(UnknownSortPropertyError(prop, model), EntityFamily.NOTE)
        assert error.kind is ErrorKind.UNKNOWN_SORT_PROPERTY
        assert error.http_status() == 400
        assert error.message == expected


class TestUniqueRule:

    @pytest.mark.parametrize(
        "constraint, message",
        [
            (USERNAME_UNIQUE_NAME, "Username already exists"),
            (EMAIL_UNIQUE_NAME, "Email already exists"),
        ],
    )
    def test_database_unique_violation_for_users(self, constraint, message):
        error = ExceptionClassifier().classify(pg_unique_violation(constraint), EntityFamily.USER)
        assert error.http_status() == 409
        assert error.message == message

    def test_duplicate_error_from_precheck(self):
        exc = DuplicateError("User already exists", fields=["email"], constraint=EMAIL_UNIQUE_NAME)
        error = ExceptionClassifier().classify(exc, EntityFamily.USER)
        assert error.kind is ErrorKind.EMAIL_TAKEN

    def test_sqlite_message_without_constraint_name(self):
        orig = Exception("UNIQUE constraint failed: users.username")
        exc = IntegrityError("INSERT", params={}, orig=orig)
        assert ExceptionClassifier().classify(exc, EntityFamily.USER).kind is ErrorKind.USERNAME_TAKEN

    def test_unique_violation_on_other_constraint_is_unexpected(self, audit_sink):
        error = ExceptionClassifier(audit_sink).classify(pg_unique_violation("roles_name_key"), EntityFamily.USER)
        assert error.http_status() == 500
        assert error.message == GENERIC_ERROR_MESSAGE

    def test_unique_rule_does_not_apply_to_notes(self, audit_sink):
        """Unique violations only become 409 for the user family."""
        error = ExceptionClassifier(audit_sink).classify(pg_unique_violation(USERNAME_UNIQUE_NAME), EntityFamily.NOTE)
        assert isinstance(error, NoteServiceError)
        assert error.http_status() == 500


class TestUnexpectedRule:

    def test_unexpected_is_logged_and_audited(self, caplog):
        """
        Behavior:
            - Any unmatched exception becomes a 500 with the generic message.
            - It is logged at ERROR with its traceback and reported to the audit sink.
        """
        sink = RecordingAuditSink()
        exc = RuntimeError("database exploded")

        with caplog.at_level(logging.DEBUG, logger="notes_api.exceptions.classifier"):
            error = ExceptionClassifier(sink).classify(exc, EntityFamily.USER)

        assert isinstance(error, UserServiceError)
        assert error.http_status() == 500
        assert error.message == GENERIC_ERROR_MESSAGE
        assert sink.unhandled == [exc]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and errors[0].exc_info is not None

    def test_testing_marker_lowers_log_level_but_still_audits(self, caplog):
        sink = RecordingAuditSink()
        exc = RuntimeError(f"{TESTING_MARKER} simulated failure")

        with caplog.at_level(logging.DEBUG, logger="notes_api.exceptions.classifier"):
            error = ExceptionClassifier(sink).classify(exc, EntityFamily.NOTE)

        assert error.http_status() == 500
        assert sink.unhandled == [exc]
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
        classifier_messages = [r.getMessage() for r in caplog.records if r.name == "notes_api.exceptions.classifier"]
        assert classifier_messages == ["classifier.unexpected_error.expected_in_tests"]

    def test_classifier_never_raises(self):
        """A broken exception object still yields a 500, not a crash."""

        class Hostile(Exception):
            def __str__(self):
                raise RuntimeError("cannot render")

        error = ExceptionClassifier().classify(Hostile(), EntityFamily.USER)
        assert isinstance(error, ServiceError)
        assert error.http_status() == 500

    def test_default_sink_discards_unexpected_errors(self, caplog):
        classifier = ExceptionClassifier()
        assert isinstance(classifier.audit_sink, NullAuditSink)

        with caplog.at_level(logging.ERROR, logger="notes_api.exceptions.classifier"):
            error = classifier.classify(RuntimeError("boom"), EntityFamily.NOTE)

        assert error.kind is ErrorKind.UNEXPECTED
        assert any(r.getMessage() == "classifier.unexpected_error" for r in caplog.records)


class TestServiceErrorShape:

    def test_payload(self):
        error = make_error(EntityFamily.USER, ErrorKind.EMAIL_TAKEN)
        assert error.to_payload("2024-07-18T01:30:59Z") == {
            "message": "Email already exists",
            "status": "409 CONFLICT",
            "instant": "2024-07-18T01:30:59Z",
        }

    def test_blank_message_falls_back_to_default(self):
        assert make_error(EntityFamily.NOTE, ErrorKind.VALIDATION, "   ").message == "Invalid request"
