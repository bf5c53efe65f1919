"""
Section Comparison Flask Routes
===============================
API endpoints for section comparison.

Each comparison runs as an independent unit of work on a bounded thread
pool; the request waits at most the configured timeout for it.
"""

import json
import time
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from functools import wraps
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Response, request, jsonify, g

from config_logging import (
    get_config,
    get_logger,
    handle_errors,
    SectionCompareError,
    ValidationError,
    ComparisonTimeoutError,
    StructuredLogger,
    SIMILARITY_METRICS,
    VERSION,
)
from .differ import SectionDiffer
from .export import get_exporter, generate_timestamped_filename
from .models import ComparisonReport

logger = get_logger('section_compare')

sc_blueprint = Blueprint('section_compare', __name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _correlation_id() -> str:
    return getattr(g, 'correlation_id', None) or StructuredLogger.get_correlation_id()


def _error_response(code: str, message: str, status: int):
    return jsonify({
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'correlation_id': _correlation_id()
        }
    }), status


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def handle_sc_errors(f):
    """
    Decorator for standardized API error handling in Section Compare routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow SC API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in {f.__name__}: {e}")
            return _error_response('INVALID_JSON', f'Invalid JSON format: {e}', 400)
        except SectionCompareError as e:
            if e.status_code >= 500:
                logger.error(f"{e.code} in {f.__name__}: {e}")
            else:
                logger.warning(f"{e.code} in {f.__name__}: {e}")
            return _error_response(e.code, e.message, e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return _error_response('INTERNAL_ERROR', 'An unexpected error occurred', 500)

    return decorated


# =============================================================================
# REQUEST HELPERS
# =============================================================================

def _get_executor() -> ThreadPoolExecutor:
    """Get or create the shared comparison pool."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=get_config().compare_workers,
                thread_name_prefix='section-compare'
            )
        return _executor


def shutdown_executor():
    """Stop the comparison pool (for app teardown and testing)."""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=False)
            _executor = None


def _parse_request() -> Tuple[List[Any], List[Any], Dict[str, Any]]:
    """
    Parse and bound-check a comparison request body.

    Returns:
        (source_sections, target_sections, body)
    """
    raw = request.get_data(as_text=True)
    if not raw:
        raise ValidationError("Request body is required")

    body = json.loads(raw)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    config = get_config()
    sides = []
    for side in ('source', 'target'):
        sections = body.get(side, [])
        if sections is None:
            sections = []
        if not isinstance(sections, list):
            raise ValidationError(f"'{side}' must be a list of sections", field=side)
        if len(sections) > config.max_sections:
            raise ValidationError(
                f"'{side}' has {len(sections)} sections; the limit is {config.max_sections}",
                field=side
            )
        sides.append(sections)

    metric = body.get('metric') or config.similarity_metric
    if metric not in SIMILARITY_METRICS:
        raise ValidationError(
            f"Unknown metric '{metric}'. Must be one of {', '.join(SIMILARITY_METRICS)}",
            field='metric'
        )
    body['metric'] = metric

    return sides[0], sides[1], body


def run_comparison(
    source_sections: List[Any],
    target_sections: List[Any],
    metric: str,
    timeout: Optional[float] = None
) -> ComparisonReport:
    """
    Run one comparison on the shared pool, bounded by a timeout.

    Raises:
        ComparisonTimeoutError: if the comparison does not finish in time
    """
    if timeout is None:
        timeout = get_config().compare_timeout

    differ = SectionDiffer(metric)
    correlation_id = StructuredLogger.get_correlation_id()

    def compare_in_worker():
        # Correlation ids are thread-local; carry the request's id over
        StructuredLogger.set_correlation_id(correlation_id)
        return differ.compare(source_sections, target_sections)

    future = _get_executor().submit(compare_in_worker)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        raise ComparisonTimeoutError(timeout)


@handle_errors(logger)
def _export_report(report: ComparisonReport, fmt: str):
    """Render a report with the exporter for fmt."""
    exporter = get_exporter(fmt)
    return exporter, exporter.export(report)


# =============================================================================
# API ENDPOINTS
# =============================================================================

@sc_blueprint.route('/sections', methods=['POST'])
@handle_sc_errors
def compare_sections():
    """
    Compare two extracted documents section by section.

    Request body:
        {
            source: [ { name, text } ],
            target: [ { name, text } ],
            highlight: bool (optional),
            metric: 'levenshtein' | 'token_jaccard' (optional)
        }

    Returns:
        {
            success: true,
            data: { records: [...], stats: {...} }
        }
    """
    source, target, body = _parse_request()

    with logger.log_operation('compare_sections', metric=body['metric']):
        report = run_comparison(source, target, body['metric'])

    data = report.to_dict()
    if body.get('highlight'):
        differ = SectionDiffer(body['metric'])
        data['records'] = [differ.highlight_record(r) for r in report]

    return jsonify({
        'success': True,
        'data': data
    })


@sc_blueprint.route('/export/<fmt>', methods=['POST'])
@handle_sc_errors
def export_sections(fmt: str):
    """
    Compare two extracted documents and return the report as a file.

    Args:
        fmt: 'csv', 'json' or 'xlsx'
    """
    source, target, body = _parse_request()
    report = run_comparison(source, target, body['metric'])

    exporter, content = _export_report(report, fmt)
    filename = generate_timestamped_filename('section_compare', exporter.extension)
    logger.info(f"Exported {len(report)} sections as {fmt}", export_format=fmt)

    return Response(
        content,
        mimetype=exporter.content_type,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )


@sc_blueprint.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    config = get_config()
    return jsonify({
        'success': True,
        'module': 'section_compare',
        'version': VERSION,
        'status': 'healthy',
        'metrics': list(SIMILARITY_METRICS),
        'default_metric': config.similarity_metric,
        'limits': {
            'max_sections': config.max_sections,
            'compare_timeout': config.compare_timeout
        }
    })
