#!/usr/bin/env python3
"""
SectionCompare - Flask Application
==================================
Serves the section comparison API.

Run with: python app.py
"""

from typing import Optional

from flask import Flask, g, jsonify

from config_logging import (
    AppConfig,
    StructuredLogger,
    get_config,
    get_logger,
    APP_NAME,
    VERSION,
)
from section_compare.routes import sc_blueprint

logger = get_logger('app')


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Configuration to use (defaults to the environment config)
    """
    config = config or get_config()

    is_valid, errors = config.validate()
    if not is_valid:
        for error in errors:
            logger.warning(f"Configuration problem: {error}")

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_content_length
    app.config['DEBUG'] = config.debug

    app.register_blueprint(sc_blueprint, url_prefix='/api/compare')

    @app.before_request
    def assign_correlation_id():
        g.correlation_id = StructuredLogger.new_correlation_id()

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'no-referrer'
        response.headers['X-Correlation-ID'] = getattr(g, 'correlation_id', '')
        return response

    @app.errorhandler(413)
    def request_too_large(e):
        return jsonify({
            'success': False,
            'error': {
                'code': 'REQUEST_TOO_LARGE',
                'message': f'Request exceeds {config.max_content_length} bytes',
                'correlation_id': getattr(g, 'correlation_id', 'unknown')
            }
        }), 413

    @app.route('/api/version')
    def version():
        return jsonify({'app': APP_NAME, 'version': VERSION})

    return app


def main():
    """Run the development server."""
    config = get_config()
    app = create_app(config)
    logger.info(f"Starting {APP_NAME} v{VERSION} on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == '__main__':
    main()
