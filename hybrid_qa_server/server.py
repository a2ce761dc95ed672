"""Flask server exposing site search and FAQ search over HTTP."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import ServerConfig
from .errors import ConfigurationError, LockTimeoutError, NetworkError, NotFoundError, ParseError, QAServerError
from .faq.service import FaqSearchService
from .rag.retriever import MAX_K, VectorRetriever

# Package loggers attached to the debug log file
DEFAULT_LOGGER_NAMES = ["hybrid_qa_server"]


def error_status(error: QAServerError) -> int:
    """HTTP status for a package error."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, NetworkError):
        return 502
    if isinstance(error, (ConfigurationError, ParseError)):
        return 400
    if isinstance(error, LockTimeoutError):
        return 503
    return 500


class QAServer:
    """Flask server answering site and FAQ queries with retrieval only."""

    def __init__(
        self,
        name: str,
        config: ServerConfig,
        retriever: Optional[VectorRetriever] = None,
        faq_service: Optional[FaqSearchService] = None,
        init_hook: Optional[Callable] = None,
        logger_names: Optional[List[str]] = None,
    ):
        """Initialize the server.

        Args:
            name: Display name for the server
            config: ServerConfig instance
            retriever: Site retriever; site routes answer 404 when absent
            faq_service: FAQ search service; FAQ routes answer 404 when absent
            init_hook: Optional function to call before serving (e.g., ensure_index)
            logger_names: Optional list of logger names for debug logging
        """
        self.name = name
        self.config = config
        self.retriever = retriever
        self.faq_service = faq_service
        self.init_hook = init_hook

        self.app = Flask(name.lower())
        CORS(self.app)

        self.logger = logging.getLogger(f"{__name__}.{name.lower()}")
        logger_names = logger_names or DEFAULT_LOGGER_NAMES

        if config.DEBUG_LOG:
            log_file = Path(config.DEBUG_LOG_FILE)
            # Use RotatingFileHandler for automatic log rotation
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=config.DEBUG_LOG_MAX_BYTES,
                backupCount=config.DEBUG_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
            )

            for logger_name in logger_names:
                logger_obj = logging.getLogger(logger_name)
                logger_obj.setLevel(logging.DEBUG)
                logger_obj.addHandler(file_handler)

            max_mb = config.DEBUG_LOG_MAX_BYTES / (1024 * 1024)
            print(f"Debug logging enabled: {log_file.absolute()}")
            print(f"  Logging: {', '.join(logger_names)}")
            print(f"  Rotation: {max_mb:.1f}MB max, {config.DEBUG_LOG_BACKUP_COUNT} backups")

        self._register_routes()

    def _register_routes(self):
        """Register Flask routes."""
        self.app.route("/health", methods=["GET"])(self.health)
        self.app.route("/v1/site/search", methods=["POST"])(self.site_search)
        self.app.route("/v1/faq/search", methods=["POST"])(self.faq_search)
        self.app.route("/v1/index/reload", methods=["POST"])(self.reload_index)

    def _error(self, error: QAServerError):
        status = error_status(error)
        self.logger.error(f"{type(error).__name__}: {error}")
        payload = {"error": str(error), "type": type(error).__name__}
        if isinstance(error, NotFoundError) and error.attempted:
            payload["attempted"] = error.attempted
        return jsonify(payload), status

    def health(self):
        """Health check endpoint."""
        return jsonify(
            {
                "status": "healthy",
                "name": self.name,
                "site_search": self.retriever is not None,
                "faq_search": self.faq_service is not None,
            }
        )

    def site_search(self):
        """Return the top passages from the site index for a query."""
        if self.retriever is None:
            return jsonify({"error": "Site search is not configured"}), 404

        data = request.get_json(silent=True)
        if data is None:
            return jsonify({"error": "Invalid JSON in request body"}), 400

        query = data.get("query")
        if not isinstance(query, str) or not query.strip():
            return jsonify({"error": "Missing required field: 'query'"}), 400

        k = data.get("k", self.config.SEARCH_TOP_K)
        if not isinstance(k, int) or isinstance(k, bool):
            return jsonify({"error": f"Field 'k' must be an integer between 1 and {MAX_K}"}), 400

        try:
            result = self.retriever.retrieve(query, k=k)
        except QAServerError as e:
            return self._error(e)
        return jsonify(result.to_dict())

    def faq_search(self):
        """Answer a question from the FAQ sheet."""
        if self.faq_service is None:
            return jsonify({"error": "FAQ search is not configured"}), 404

        data = request.get_json(silent=True)
        if data is None:
            return jsonify({"error": "Invalid JSON in request body"}), 400

        question = data.get("question")
        if not isinstance(question, str) or not question.strip():
            return jsonify({"error": "Missing required field: 'question'"}), 400

        gid = data.get("gid")
        try:
            answer = self.faq_service.search(
                question,
                sheet_url=data.get("sheet_url") or None,
                gid=str(gid) if gid not in (None, "") else None,
            )
        except QAServerError as e:
            return self._error(e)
        return jsonify(answer.to_dict())

    def reload_index(self):
        """Drop the cached site index so the next query rereads it from disk."""
        if self.retriever is None:
            return jsonify({"error": "Site search is not configured"}), 404
        self.retriever.store.invalidate()
        return jsonify({"status": "reloaded"})

    def run(self, port: Optional[int] = None, host: Optional[str] = None, debug: bool = False):
        """Run the Flask server.

        Args:
            port: Port to run on (defaults to config.DEFAULT_PORT)
            host: Host to bind to (defaults to config.DEFAULT_HOST, which is 127.0.0.1 for security)
            debug: Enable debug mode
        """
        port = port or self.config.DEFAULT_PORT
        host = host or self.config.DEFAULT_HOST

        print(
            f"""
{self.name} - Hybrid QA Server

Site search: {"enabled" if self.retriever else "disabled"}
FAQ search: {"enabled" if self.faq_service else "disabled"}
Host: {host}
Port: {port}
API: http://localhost:{port}/v1
"""
        )

        # Security warning if binding to all interfaces
        if host == "0.0.0.0":
            print("WARNING: Server is binding to 0.0.0.0 (all network interfaces)")
            print("   This exposes the API to your entire network without authentication.")
            print("   For security, use HOST=127.0.0.1 (localhost only) unless you need network access.\n")

        if self.init_hook:
            try:
                self.init_hook()
            except QAServerError as e:
                print(f"Warning: Initialization hook failed: {e}")

        self.app.run(host=host, port=port, debug=debug)
