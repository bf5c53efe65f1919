"""
Tests for Configuration & Logging
=================================
"""

import json
import logging

import pytest

from config_logging import (
    AppConfig,
    JsonFormatter,
    StructuredLogger,
    ValidationError,
    ProcessingError,
    ComparisonTimeoutError,
    get_config,
    get_logger,
    handle_errors,
    reset_config,
)


class TestAppConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, fresh_config):
        config = get_config()
        assert config.host == '127.0.0.1'
        assert config.similarity_metric == 'levenshtein'
        assert config.log_to_file is False
        assert config.validate() == (True, [])

    def test_from_env(self, fresh_config, monkeypatch):
        monkeypatch.setenv('SC_MAX_SECTIONS', '10')
        monkeypatch.setenv('SC_COMPARE_TIMEOUT', '2.5')
        monkeypatch.setenv('SC_SIMILARITY_METRIC', 'token_jaccard')
        reset_config()
        config = get_config()
        assert config.max_sections == 10
        assert config.compare_timeout == 2.5
        assert config.similarity_metric == 'token_jaccard'

    def test_get_config_is_cached(self, fresh_config):
        assert get_config() is get_config()

    def test_production_forces_debug_off(self, fresh_config, monkeypatch):
        monkeypatch.setenv('SC_ENV', 'production')
        config = AppConfig(debug=True)
        assert config.debug is False
        assert config.log_level == 'WARNING'

    def test_validate_reports_errors(self, fresh_config):
        config = AppConfig(max_sections=0, compare_timeout=0, similarity_metric='cosine')
        is_valid, errors = config.validate()
        assert not is_valid
        assert len(errors) == 3

    def test_log_dir_created_when_logging_to_file(self, fresh_config, tmp_path):
        log_dir = tmp_path / 'logs'
        AppConfig(log_to_file=True, log_dir=log_dir)
        assert log_dir.is_dir()


class TestStructuredLogging:
    """Tests for StructuredLogger and JsonFormatter."""

    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord('section_compare', logging.INFO, __file__, 1,
                                   'compared %s sections', (4,), None)
        record.metric = 'levenshtein'
        data = json.loads(JsonFormatter().format(record))
        assert data['message'] == 'compared 4 sections'
        assert data['level'] == 'INFO'
        assert data['metric'] == 'levenshtein'

    def test_correlation_id_per_thread(self):
        correlation_id = StructuredLogger.new_correlation_id()
        assert StructuredLogger.get_correlation_id() == correlation_id

    def test_log_records_carry_correlation_id(self, fresh_config, capture_logger):
        logger = get_logger('section_compare.test')
        records = capture_logger('section_compare.test')
        correlation_id = StructuredLogger.new_correlation_id()
        logger.info('hello', sections=3)
        record = records[-1]
        assert record.correlation_id == correlation_id
        assert record.sections == 3

    def test_child_logger_does_not_propagate(self, fresh_config, capture_logger):
        """A child record is handled once, by the child's own handlers."""
        get_logger('section_compare')
        child = get_logger('section_compare.child')
        parent_records = capture_logger('section_compare')
        child_records = capture_logger('section_compare.child')
        child.info('once')
        assert len(child_records) == 1
        assert parent_records == []

    def test_log_operation_reraises(self, fresh_config):
        logger = get_logger('section_compare.test')
        with pytest.raises(RuntimeError):
            with logger.log_operation('compare'):
                raise RuntimeError('boom')


class TestErrors:
    """Tests for the exception hierarchy and handle_errors."""

    def test_validation_error_dict(self):
        error = ValidationError('bad input', field='source')
        data = error.to_dict()
        assert data['success'] is False
        assert data['error']['code'] == 'VALIDATION_ERROR'
        assert data['error']['details']['field'] == 'source'
        assert error.status_code == 400

    def test_timeout_error(self):
        error = ComparisonTimeoutError(1.5)
        assert error.status_code == 504
        assert '1.5s' in error.message

    def test_handle_errors_converts_value_error(self, fresh_config):
        @handle_errors()
        def parse():
            raise ValueError('nope')

        with pytest.raises(ValidationError):
            parse()

    def test_handle_errors_logs_value_error_as_warning(self, fresh_config, capture_logger):
        logger = get_logger('section_compare.test_errors')
        records = capture_logger('section_compare.test_errors')

        @handle_errors(logger)
        def parse():
            raise ValueError('Unsupported export format: pdf')

        with pytest.raises(ValidationError):
            parse()
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].exc_info is None

    def test_handle_errors_wraps_unexpected(self, fresh_config):
        @handle_errors()
        def explode():
            raise KeyError('x')

        with pytest.raises(ProcessingError):
            explode()

    def test_handle_errors_passes_own_errors(self, fresh_config):
        @handle_errors()
        def reject():
            raise ComparisonTimeoutError(1)

        with pytest.raises(ComparisonTimeoutError):
            reject()
